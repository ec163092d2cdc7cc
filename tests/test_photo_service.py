"""Photo Service 통합 테스트"""

import pytest

from snapcircle.core.errors import InvalidOperation, NotFound
from snapcircle.core.friendship.notifications import NotificationKinds
from snapcircle.core.visibility import Visibility
from snapcircle.db.relationship_store import SqlRelationshipStore
from snapcircle.db.user_directory import SqlUserDirectory
from snapcircle.services.friendship_service import FriendshipService
from snapcircle.services.notification_service import (
    DatabaseNotificationSink,
    NotificationDispatcher,
    commit_and_dispatch,
)
from snapcircle.services.photo_service import PhotoService
from snapcircle.services.storage import MemoryBlobStorage
from snapcircle.services.visibility_service import VisibilityService

IMAGE = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture()
def setup(session, make_user):
    """PhotoService + 사용자 3명 (owner-friend 친구, stranger 남남)"""
    users = SqlUserDirectory(session)
    friendships = FriendshipService(SqlRelationshipStore(session), users)
    storage = MemoryBlobStorage()
    service = PhotoService(
        session, storage, users, friendships, VisibilityService(friendships)
    )
    owner = make_user("Owner")
    friend = make_user("Friend")
    stranger = make_user("Stranger")
    request = friendships.send_request(owner, friend).result
    friendships.accept(request.friendship_id, friend)
    return service, friendships, storage, owner, friend, stranger


@pytest.fixture()
def dispatcher(session):
    return NotificationDispatcher(DatabaseNotificationSink(session))


class TestUpload:
    def test_upload_stores_blob_and_row(self, setup):
        service, _, storage, owner, *_ = setup

        outcome = service.upload(owner, IMAGE, Visibility.CLOSE_FRIENDS)

        photo = outcome.result
        assert photo.owner_id == owner
        assert photo.visibility == "CLOSE_FRIENDS"
        assert photo.url.startswith("memory://snapcircle/photos/")
        assert storage.get(photo.storage_key) == IMAGE
        assert outcome.notifications == []

    def test_default_visibility(self, setup):
        service, _, _, owner, *_ = setup
        assert service.upload(owner, IMAGE).result.visibility == "ALL_FRIENDS"

    def test_unknown_visibility_rejected(self, setup):
        service, _, storage, owner, *_ = setup
        with pytest.raises(InvalidOperation):
            service.upload(owner, IMAGE, "EVERYONE")
        assert len(storage) == 0

    def test_empty_string_visibility_rejected(self, setup):
        """빈 문자열은 생략과 다르다. 기본값으로 바뀌지 않는다."""
        service, _, storage, owner, *_ = setup
        with pytest.raises(InvalidOperation):
            service.upload(owner, IMAGE, "")
        assert len(storage) == 0

    def test_empty_data_rejected(self, setup):
        service, _, _, owner, *_ = setup
        with pytest.raises(InvalidOperation):
            service.upload(owner, b"")

    def test_unknown_owner(self, setup):
        service, *_ = setup
        with pytest.raises(NotFound):
            service.upload(9999, IMAGE)

    def test_participants_get_copy_and_notification(self, setup):
        service, _, storage, owner, friend, stranger = setup

        outcome = service.upload(
            owner, IMAGE, Visibility.PRIVATE, participant_ids=[friend, owner, friend]
        )

        assert len(storage) == 1
        assert [c.user_id for c in outcome.notifications] == [friend]
        command = outcome.notifications[0]
        assert command.kind == NotificationKinds.PHOTO_SHARED
        assert command.message == "Owner님이 사진을 앨범에 등록했습니다."

        copies = service.list_user_photos(friend, friend)
        assert len(copies) == 1
        assert copies[0].url == outcome.result.url
        assert copies[0].visibility == "PRIVATE"

    def test_unknown_participant_rejects_upload(self, setup):
        service, _, storage, owner, *_ = setup
        with pytest.raises(NotFound):
            service.upload(owner, IMAGE, participant_ids=[9999])
        assert len(storage) == 0
        assert service.list_user_photos(owner, owner) == []


class TestQueries:
    def test_get_photo_respects_visibility(self, setup):
        service, _, _, owner, friend, stranger = setup
        photo = service.upload(owner, IMAGE, Visibility.ALL_FRIENDS).result

        assert service.get_photo(photo.photo_id, friend).photo_id == photo.photo_id
        with pytest.raises(NotFound):
            service.get_photo(photo.photo_id, stranger)

    def test_get_missing_photo(self, setup):
        service, _, _, owner, *_ = setup
        with pytest.raises(NotFound):
            service.get_photo(12345, owner)

    def test_list_user_photos_filtered_latest_first(self, setup):
        service, _, _, owner, friend, stranger = setup
        first = service.upload(owner, IMAGE, Visibility.ALL_FRIENDS).result
        service.upload(owner, IMAGE, Visibility.PRIVATE)
        third = service.upload(owner, IMAGE, Visibility.ALL_FRIENDS).result

        assert [p.photo_id for p in service.list_user_photos(owner, friend)] == [
            third.photo_id,
            first.photo_id,
        ]
        assert len(service.list_user_photos(owner, owner)) == 3
        assert service.list_user_photos(owner, stranger) == []

    def test_feed_includes_self_and_friends(self, setup):
        service, friendships, _, owner, friend, stranger = setup
        mine = service.upload(friend, IMAGE, Visibility.PRIVATE).result
        theirs = service.upload(owner, IMAGE, Visibility.ALL_FRIENDS).result
        service.upload(owner, IMAGE, Visibility.CLOSE_FRIENDS)
        service.upload(stranger, IMAGE, Visibility.ALL_FRIENDS)

        feed_ids = [p.photo_id for p in service.feed(friend)]
        assert feed_ids == [theirs.photo_id, mine.photo_id]


class TestMutations:
    def test_update_visibility(self, setup):
        service, _, _, owner, friend, _ = setup
        photo = service.upload(owner, IMAGE, Visibility.ALL_FRIENDS).result

        updated = service.update_visibility(photo.photo_id, owner, "PRIVATE")

        assert updated.visibility == "PRIVATE"
        with pytest.raises(NotFound):
            service.get_photo(photo.photo_id, friend)

    def test_update_visibility_not_owner(self, setup):
        service, _, _, owner, friend, _ = setup
        photo = service.upload(owner, IMAGE).result
        with pytest.raises(NotFound):
            service.update_visibility(photo.photo_id, friend, "PRIVATE")

    def test_update_visibility_invalid_tier(self, setup):
        service, _, _, owner, *_ = setup
        photo = service.upload(owner, IMAGE).result
        with pytest.raises(InvalidOperation):
            service.update_visibility(photo.photo_id, owner, "friends")

    def test_delete_keeps_shared_blob(self, setup, session, dispatcher):
        service, _, storage, owner, friend, _ = setup
        photo = service.upload(owner, IMAGE, participant_ids=[friend]).result

        outcome = service.delete_photo(photo.photo_id, owner)
        assert outcome.after_commit == []
        commit_and_dispatch(session, outcome, dispatcher)
        assert storage.get(photo.storage_key) == IMAGE

        copy = service.list_user_photos(friend, friend)[0]
        outcome = service.delete_photo(copy.photo_id, friend)
        # 커밋 전에는 blob이 남아 있다
        assert storage.get(photo.storage_key) == IMAGE

        commit_and_dispatch(session, outcome, dispatcher)
        assert storage.get(photo.storage_key) is None

    def test_rolled_back_delete_keeps_row_and_blob(self, setup, session):
        service, _, storage, owner, *_ = setup
        photo = service.upload(owner, IMAGE).result
        session.commit()

        outcome = service.delete_photo(photo.photo_id, owner)
        assert len(outcome.after_commit) == 1
        session.rollback()

        restored = service.get_photo(photo.photo_id, owner)
        assert restored.storage_key == photo.storage_key
        assert storage.get(restored.storage_key) == IMAGE

    def test_delete_not_owner(self, setup):
        service, _, _, owner, friend, _ = setup
        photo = service.upload(owner, IMAGE).result
        with pytest.raises(NotFound):
            service.delete_photo(photo.photo_id, friend)
