"""친구 관계 Core 패키지 — 공개 API"""

from snapcircle.core.friendship.models import (
    FriendEntry,
    Friendship,
    FriendshipStatus,
    PendingRequest,
    UserProfile,
    UserSearchResult,
    canonical_pair,
)
from snapcircle.core.friendship.notifications import (
    NotificationCommand,
    NotificationKinds,
    Outcome,
)
from snapcircle.core.friendship.transitions import (
    TRANSITION_TABLE,
    ActorRole,
    FriendshipAction,
    blocks_new_request,
    evaluate_transition,
)

__all__ = [
    "FriendEntry",
    "Friendship",
    "FriendshipStatus",
    "PendingRequest",
    "UserProfile",
    "UserSearchResult",
    "canonical_pair",
    "NotificationCommand",
    "NotificationKinds",
    "Outcome",
    "TRANSITION_TABLE",
    "ActorRole",
    "FriendshipAction",
    "blocks_new_request",
    "evaluate_transition",
]
