"""친구 요청 상태 전이 판정

∅ → pending → {accepted, rejected}
pending → ∅ (요청자 취소), accepted → ∅ (어느 쪽이든 친구 삭제)
rejected는 종료 상태. 같은 쌍의 새 요청은 rejected 레코드를 대체한다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from snapcircle.core.friendship.models import Friendship, FriendshipStatus


class FriendshipAction(str, Enum):
    REQUEST = "request"
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"
    REMOVE = "remove"


class ActorRole(str, Enum):
    """전이를 실행할 수 있는 쪽"""

    REQUESTER = "requester"
    RECEIVER = "receiver"
    EITHER = "either"


@dataclass(frozen=True)
class TransitionEntry:
    """전이 결과. next_status가 None이면 레코드 삭제."""

    actor: ActorRole
    next_status: Optional[FriendshipStatus]


TRANSITION_TABLE: Dict[Tuple[FriendshipStatus, FriendshipAction], TransitionEntry] = {
    (FriendshipStatus.PENDING, FriendshipAction.ACCEPT): TransitionEntry(
        actor=ActorRole.RECEIVER,
        next_status=FriendshipStatus.ACCEPTED,
    ),
    (FriendshipStatus.PENDING, FriendshipAction.DECLINE): TransitionEntry(
        actor=ActorRole.RECEIVER,
        next_status=FriendshipStatus.REJECTED,
    ),
    (FriendshipStatus.PENDING, FriendshipAction.CANCEL): TransitionEntry(
        actor=ActorRole.REQUESTER,
        next_status=None,
    ),
    (FriendshipStatus.ACCEPTED, FriendshipAction.REMOVE): TransitionEntry(
        actor=ActorRole.EITHER,
        next_status=None,
    ),
}

# 새 요청을 막는 상태
BLOCKING_STATUSES = (FriendshipStatus.PENDING, FriendshipStatus.ACCEPTED)


def actor_allowed(friendship: Friendship, role: ActorRole, user_id: int) -> bool:
    if role == ActorRole.REQUESTER:
        return friendship.requester_id == user_id
    if role == ActorRole.RECEIVER:
        return friendship.receiver_id == user_id
    return friendship.involves(user_id)


def evaluate_transition(
    friendship: Friendship,
    action: FriendshipAction,
    acting_user_id: int,
) -> Optional[TransitionEntry]:
    """현재 상태 + 행위 + 행위자로 전이 가능 여부 확인.

    허용되지 않는 조합이면 None. 호출 측은 None을 NotFound로 취급한다
    (레코드 존재 여부를 드러내지 않기 위해).
    """
    entry = TRANSITION_TABLE.get((friendship.status, action))
    if entry is None:
        return None
    if not actor_allowed(friendship, entry.actor, acting_user_id):
        return None
    return entry


def blocks_new_request(existing: Optional[Friendship]) -> bool:
    return existing is not None and existing.status in BLOCKING_STATUSES
