"""Visibility Service — 사진 공개 범위 판정 (읽기 전용)

판정 규칙은 core.visibility.can_view, 관계 조회는 FriendshipService 쿼리만 사용한다.
"""

from typing import Dict, Iterable, List

from snapcircle.core.errors import NotFound
from snapcircle.core.friendship.models import Friendship
from snapcircle.core.logging import get_logger
from snapcircle.core.photo import Photo
from snapcircle.core.visibility import can_view
from snapcircle.services.friendship_service import FriendshipService

logger = get_logger(__name__)


class VisibilityService:
    def __init__(self, friendships: FriendshipService) -> None:
        self._friendships = friendships

    def can_view(self, photo: Photo, viewer_id: int) -> bool:
        """단건 판정"""
        if photo.owner_id == viewer_id:
            return True
        friendship = self._friendships.get_friendship(photo.owner_id, viewer_id)
        return can_view(photo.visibility, photo.owner_id, viewer_id, friendship)

    def filter_visible(self, photos: Iterable[Photo], viewer_id: int) -> List[Photo]:
        """목록 필터. 입력 순서 유지, 관계는 viewer 기준 한 번에 조회."""
        photos = list(photos)
        if all(p.owner_id == viewer_id for p in photos):
            return photos

        by_owner: Dict[int, Friendship] = {
            f.counterpart(viewer_id): f
            for f in self._friendships.accepted_friendships(viewer_id)
        }
        visible = [
            p
            for p in photos
            if can_view(p.visibility, p.owner_id, viewer_id, by_owner.get(p.owner_id))
        ]
        logger.debug(
            f"Visibility filter: viewer={viewer_id} {len(visible)}/{len(photos)} visible"
        )
        return visible

    def ensure_visible(self, photo: Photo, viewer_id: int) -> Photo:
        """볼 수 없으면 존재하지 않는 것과 같은 NotFound"""
        if not self.can_view(photo, viewer_id):
            raise NotFound("사진을 찾을 수 없습니다.")
        return photo
