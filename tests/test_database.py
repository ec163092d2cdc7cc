"""SQLite 엔진 설정 테스트"""

import pytest
from sqlalchemy.exc import IntegrityError

from snapcircle.db.models import PhotoModel, UserModel


class TestSqliteEngine:
    def test_foreign_keys_enforced(self, session):
        session.add(PhotoModel(owner_id=999, url="memory://x", visibility="PRIVATE"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_savepoint_rollback_keeps_outer_work(self, session, make_user):
        """SAVEPOINT 안의 실패는 바깥 트랜잭션의 변경을 지우지 않는다."""
        alice = make_user("Alice")

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(UserModel(nickname="Alice", email="other@example.com"))
                session.flush()

        assert session.get(UserModel, alice) is not None
        session.commit()
        assert session.get(UserModel, alice).email == "alice@example.com"
