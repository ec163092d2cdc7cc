"""Photo Service — 사진 메타데이터 저장/조회와 공개 범위 적용

바이너리는 BlobStorage, 메타데이터는 photos 테이블.
조회 경로는 모두 VisibilityService를 거친다.
"""

from functools import partial
from typing import Iterable, List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from snapcircle.config import settings
from snapcircle.core.errors import InvalidOperation, NotFound
from snapcircle.core.friendship.notifications import (
    NotificationCommand,
    NotificationKinds,
    Outcome,
    photo_shared_message,
)
from snapcircle.core.logging import get_logger
from snapcircle.core.photo import Photo
from snapcircle.core.visibility import Visibility, parse_visibility
from snapcircle.db.models import PhotoModel
from snapcircle.db.user_directory import UserDirectory
from snapcircle.services.friendship_service import FriendshipService
from snapcircle.services.storage.base import BlobStorage
from snapcircle.services.visibility_service import VisibilityService

logger = get_logger(__name__)

PHOTO_FOLDER = "photos"


class PhotoService:
    """사진 업로드, 조회, 공개 범위 변경, 삭제"""

    def __init__(
        self,
        db_session: Session,
        storage: BlobStorage,
        users: UserDirectory,
        friendships: FriendshipService,
        visibility: VisibilityService,
    ) -> None:
        self._db = db_session
        self._storage = storage
        self._users = users
        self._friendships = friendships
        self._visibility = visibility

    # ── 업로드 ───────────────────────────────────────────────

    def upload(
        self,
        owner_id: int,
        data: bytes,
        visibility: Union[str, Visibility, None] = None,
        participant_ids: Iterable[int] = (),
        content_type: str = "image/png",
    ) -> Outcome[Photo]:
        """사진 업로드.

        participant_ids의 각 사용자 앨범에도 같은 이미지를 가리키는 사진이
        생성되고, 참여자에게 알림이 간다.
        """
        if visibility is None:
            visibility = settings.DEFAULT_PHOTO_VISIBILITY
        tier = _require_visibility(visibility)
        if not data:
            raise InvalidOperation("빈 이미지는 업로드할 수 없습니다.")

        owner = self._users.find_by_id(owner_id)
        if owner is None:
            raise NotFound("사용자를 찾을 수 없습니다.")

        participants: List[int] = []
        for user_id in participant_ids:
            if user_id != owner_id and user_id not in participants:
                participants.append(user_id)
        profiles = self._users.find_many(participants)
        if len(profiles) != len(participants):
            raise NotFound("사용자를 찾을 수 없습니다.")

        blob = self._storage.put(data, PHOTO_FOLDER, content_type)
        try:
            with self._db.begin_nested():
                row = self._add_photo_row(owner_id, blob.url, blob.key, tier)
                for user_id in participants:
                    self._add_photo_row(user_id, blob.url, blob.key, tier)
                self._db.flush()
        except Exception:
            logger.exception(f"Photo upload failed: owner={owner_id}")
            self._storage.delete(blob.key)
            raise

        logger.info(
            f"Photo uploaded: photo={row.id} owner={owner_id} "
            f"visibility={tier.value} participants={len(participants)}"
        )
        return Outcome(
            result=self._photo_from_orm(row),
            notifications=[
                NotificationCommand(
                    user_id=user_id,
                    kind=NotificationKinds.PHOTO_SHARED,
                    message=photo_shared_message(owner.nickname),
                )
                for user_id in participants
            ],
        )

    # ── 조회 ─────────────────────────────────────────────────

    def get_photo(self, photo_id: int, viewer_id: int) -> Photo:
        """없거나 볼 수 없으면 동일한 NotFound"""
        row = self._db.get(PhotoModel, photo_id)
        if row is None:
            raise NotFound("사진을 찾을 수 없습니다.")
        return self._visibility.ensure_visible(self._photo_from_orm(row), viewer_id)

    def list_user_photos(self, owner_id: int, viewer_id: int) -> List[Photo]:
        """특정 사용자의 사진 중 viewer가 볼 수 있는 것, 최신순"""
        stmt = (
            select(PhotoModel)
            .where(PhotoModel.owner_id == owner_id)
            .order_by(PhotoModel.created_at.desc(), PhotoModel.id.desc())
        )
        photos = [self._photo_from_orm(r) for r in self._db.scalars(stmt)]
        return self._visibility.filter_visible(photos, viewer_id)

    def feed(self, viewer_id: int) -> List[Photo]:
        """본인 + 친구 사진 중 볼 수 있는 것, 최신순"""
        owner_ids = {viewer_id}
        owner_ids.update(
            f.counterpart(viewer_id)
            for f in self._friendships.accepted_friendships(viewer_id)
        )
        stmt = (
            select(PhotoModel)
            .where(PhotoModel.owner_id.in_(owner_ids))
            .order_by(PhotoModel.created_at.desc(), PhotoModel.id.desc())
        )
        photos = [self._photo_from_orm(r) for r in self._db.scalars(stmt)]
        return self._visibility.filter_visible(photos, viewer_id)

    # ── 변경 ─────────────────────────────────────────────────

    def update_visibility(
        self,
        photo_id: int,
        owner_id: int,
        visibility: Union[str, Visibility, None],
    ) -> Photo:
        """공개 범위 변경 (소유자만)"""
        tier = _require_visibility(visibility)
        row = self._get_owned_row(photo_id, owner_id)

        old_value = row.visibility
        row.visibility = tier.value
        self._db.flush()
        logger.info(
            f"Photo visibility changed: photo={photo_id} {old_value}→{tier.value}"
        )
        return self._photo_from_orm(row)

    def delete_photo(self, photo_id: int, owner_id: int) -> Outcome[None]:
        """사진 삭제 (소유자만).

        같은 blob을 참조하는 사진이 더 없으면 blob 삭제를 after_commit에 담는다.
        롤백되면 행과 blob이 함께 남는다.
        """
        row = self._get_owned_row(photo_id, owner_id)
        storage_key = row.storage_key

        self._db.delete(row)
        self._db.flush()

        outcome: Outcome[None] = Outcome(result=None)
        if storage_key and self._count_references(storage_key) == 0:
            outcome.after_commit.append(partial(self._storage.delete, storage_key))
        logger.info(f"Photo deleted: photo={photo_id} owner={owner_id}")
        return outcome

    # ── ORM ↔ Core 변환 ─────────────────────────────────────

    @staticmethod
    def _photo_from_orm(model: PhotoModel) -> Photo:
        return Photo(
            photo_id=model.id,
            owner_id=model.owner_id,
            url=model.url,
            visibility=model.visibility,
            storage_key=model.storage_key,
            created_at=model.created_at,
        )

    # ── 내부 헬퍼 ────────────────────────────────────────────

    def _add_photo_row(
        self, owner_id: int, url: str, storage_key: str, tier: Visibility
    ) -> PhotoModel:
        row = PhotoModel(
            owner_id=owner_id, url=url, storage_key=storage_key, visibility=tier.value
        )
        self._db.add(row)
        return row

    def _get_owned_row(self, photo_id: int, owner_id: int) -> PhotoModel:
        row: Optional[PhotoModel] = self._db.get(PhotoModel, photo_id)
        if row is None or row.owner_id != owner_id:
            raise NotFound("사진을 찾을 수 없습니다.")
        return row

    def _count_references(self, storage_key: str) -> int:
        stmt = (
            select(func.count())
            .select_from(PhotoModel)
            .where(PhotoModel.storage_key == storage_key)
        )
        return self._db.scalar(stmt) or 0


def _require_visibility(value: Union[str, Visibility, None]) -> Visibility:
    tier = parse_visibility(value)
    if tier is None:
        raise InvalidOperation(f"알 수 없는 공개 범위입니다: {value}")
    return tier
