"""사진 공개 범위 판정

순수 함수 — 상태 변경 없음, 외부 의존 없음.
"""

from enum import Enum
from typing import Optional, Union

from snapcircle.core.friendship.models import Friendship


class Visibility(str, Enum):
    """사진 공개 범위"""

    PRIVATE = "PRIVATE"
    CLOSE_FRIENDS = "CLOSE_FRIENDS"
    ALL_FRIENDS = "ALL_FRIENDS"


def parse_visibility(value: Union[str, Visibility, None]) -> Optional[Visibility]:
    """알 수 없는 값이면 None"""
    if isinstance(value, Visibility):
        return value
    try:
        return Visibility(value)
    except ValueError:
        return None


def can_view(
    visibility: Union[str, Visibility, None],
    owner_id: int,
    viewer_id: int,
    friendship: Optional[Friendship],
) -> bool:
    """viewer가 owner의 사진을 볼 수 있는지 판정.

    1. 본인 → 항상 공개
    2. PRIVATE → 본인 외 비공개
    3. CLOSE_FRIENDS → accepted 관계 + owner 쪽 플래그가 켜져 있어야 함
       (viewer가 owner를 친한 친구로 지정한 것은 무관)
    4. ALL_FRIENDS → accepted 관계
    5. 그 외 값 → 비공개
    """
    if viewer_id == owner_id:
        return True

    tier = parse_visibility(visibility)
    if tier is None or tier == Visibility.PRIVATE:
        return False

    if friendship is None or not friendship.is_accepted:
        return False
    if not (friendship.involves(owner_id) and friendship.involves(viewer_id)):
        return False

    if tier == Visibility.CLOSE_FRIENDS:
        return friendship.close_flag_of(owner_id)
    if tier == Visibility.ALL_FRIENDS:
        return True
    return False
