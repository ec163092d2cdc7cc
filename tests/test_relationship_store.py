"""RelationshipStore 통합 테스트 (인메모리 SQLite)"""

import pytest

from snapcircle.core.friendship.models import FriendshipStatus
from snapcircle.db.relationship_store import (
    DuplicatePairError,
    SqlRelationshipStore,
    pair_clause,
)


@pytest.fixture()
def setup(session, make_user):
    store = SqlRelationshipStore(session)
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    return store, session, alice, bob, carol


class TestCreate:
    def test_create_sets_canonical_pair(self, setup):
        store, session, alice, bob, _ = setup
        f = store.create(bob, alice)

        assert f.requester_id == bob
        assert f.receiver_id == alice
        assert f.status == FriendshipStatus.PENDING
        assert f.requested_at is not None
        assert f.pair == (min(alice, bob), max(alice, bob))

    def test_duplicate_pair_rejected_either_direction(self, setup):
        """유니크 제약이 방향과 무관하게 두 번째 삽입을 막는다."""
        store, session, alice, bob, _ = setup
        store.create(alice, bob)
        session.commit()

        with pytest.raises(DuplicatePairError):
            store.create(bob, alice)

        # 첫 레코드는 그대로
        assert len(store.find_all(pair_clause(alice, bob))) == 1

    def test_duplicate_in_open_transaction_keeps_earlier_inserts(self, setup):
        """같은 작업 단위에서 먼저 만든 레코드는 충돌 후에도 남는다."""
        store, session, alice, bob, carol = setup
        kept = store.create(carol, alice)
        store.create(alice, bob)

        with pytest.raises(DuplicatePairError):
            store.create(bob, alice)

        assert store.find_pair(alice, carol).friendship_id == kept.friendship_id
        session.commit()
        assert len(store.find_all({"receiver_id": alice}, {"requester_id": alice})) == 2


class TestFind:
    def test_find_pair_any_direction(self, setup):
        store, session, alice, bob, _ = setup
        created = store.create(alice, bob)
        assert store.find_pair(bob, alice).friendship_id == created.friendship_id
        assert store.find_pair(alice, bob).friendship_id == created.friendship_id

    def test_find_missing_returns_none(self, setup):
        store, session, alice, bob, _ = setup
        assert store.find_pair(alice, bob) is None
        assert store.find({"id": 12345}) is None

    def test_or_of_and_clauses(self, setup):
        store, session, alice, bob, carol = setup
        ab = store.create(alice, bob)
        ca = store.create(carol, alice)
        ab.status = FriendshipStatus.ACCEPTED
        store.save(ab)

        accepted = store.find_all(
            {"requester_id": alice, "status": FriendshipStatus.ACCEPTED},
            {"receiver_id": alice, "status": FriendshipStatus.ACCEPTED},
        )
        assert [f.friendship_id for f in accepted] == [ab.friendship_id]

        involving_alice = store.find_all({"requester_id": alice}, {"receiver_id": alice})
        assert {f.friendship_id for f in involving_alice} == {
            ab.friendship_id,
            ca.friendship_id,
        }

    def test_close_flag_filter(self, setup):
        store, session, alice, bob, _ = setup
        f = store.create(alice, bob)
        f.status = FriendshipStatus.ACCEPTED
        f.receiver_close_friend = True
        store.save(f)

        assert store.find({"receiver_close_friend": True}) is not None
        assert store.find({"requester_close_friend": True}) is None

    def test_unknown_field_rejected(self, setup):
        store, *_ = setup
        with pytest.raises(ValueError):
            store.find({"nickname": "Alice"})

    def test_order_by_requested_at_desc(self, setup):
        store, session, alice, bob, carol = setup
        first = store.create(bob, alice)
        second = store.create(carol, alice)

        rows = store.find_all(
            {"receiver_id": alice}, order_by="requested_at", descending=True
        )
        assert [r.friendship_id for r in rows] == [
            second.friendship_id,
            first.friendship_id,
        ]

    def test_unknown_order_field_rejected(self, setup):
        store, *_ = setup
        with pytest.raises(ValueError):
            store.find_all(order_by="status")


class TestSaveDelete:
    def test_save_persists_mutable_fields(self, setup):
        store, session, alice, bob, _ = setup
        f = store.create(alice, bob)
        f.status = FriendshipStatus.ACCEPTED
        f.requester_close_friend = True
        store.save(f)
        session.expire_all()

        loaded = store.find_pair(alice, bob)
        assert loaded.status == FriendshipStatus.ACCEPTED
        assert loaded.requester_close_friend is True
        assert loaded.receiver_close_friend is False

    def test_delete(self, setup):
        store, session, alice, bob, _ = setup
        f = store.create(alice, bob)
        store.delete(f)
        assert store.find_pair(alice, bob) is None

    def test_save_missing_raises(self, setup):
        store, session, alice, bob, _ = setup
        f = store.create(alice, bob)
        store.delete(f)
        with pytest.raises(ValueError):
            store.save(f)
