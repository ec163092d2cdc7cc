"""UserDirectory — 사용자 조회 (읽기 전용)"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from snapcircle.core.friendship.models import UserProfile
from snapcircle.db.models import UserModel


class UserDirectory(ABC):
    """사용자 존재 확인과 표시용 정보 제공"""

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[UserProfile]:
        ...

    @abstractmethod
    def find_many(self, user_ids: Iterable[int]) -> Dict[int, UserProfile]:
        ...

    @abstractmethod
    def search(
        self, substring: str, exclude_user_id: Optional[int] = None, limit: int = 50
    ) -> List[UserProfile]:
        """닉네임 또는 이메일 부분 일치 (대소문자 무시)"""
        ...


class SqlUserDirectory(UserDirectory):
    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def find_by_id(self, user_id: int) -> Optional[UserProfile]:
        row = self._db.get(UserModel, user_id)
        if row is None:
            return None
        return self._profile_from_orm(row)

    def find_many(self, user_ids: Iterable[int]) -> Dict[int, UserProfile]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self._db.scalars(select(UserModel).where(UserModel.id.in_(ids)))
        return {row.id: self._profile_from_orm(row) for row in rows}

    def search(
        self, substring: str, exclude_user_id: Optional[int] = None, limit: int = 50
    ) -> List[UserProfile]:
        pattern = f"%{_escape_like(substring)}%"
        stmt = select(UserModel).where(
            or_(
                UserModel.nickname.ilike(pattern, escape="\\"),
                UserModel.email.ilike(pattern, escape="\\"),
            )
        )
        if exclude_user_id is not None:
            stmt = stmt.where(UserModel.id != exclude_user_id)
        stmt = stmt.order_by(UserModel.nickname, UserModel.id).limit(limit)
        return [self._profile_from_orm(row) for row in self._db.scalars(stmt)]

    @staticmethod
    def _profile_from_orm(model: UserModel) -> UserProfile:
        return UserProfile(
            user_id=model.id,
            nickname=model.nickname,
            email=model.email,
            profile_image_url=model.profile_image_url,
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
