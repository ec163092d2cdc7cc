"""Friendship Service — 친구 관계 상태 머신

모든 관계 레코드 변경은 이 서비스를 거친다.
변경 연산은 Outcome(결과, 알림 커맨드)을 돌려주고,
알림은 호출 측이 커밋한 뒤 NotificationDispatcher로 실행한다.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from snapcircle.config import settings
from snapcircle.core.errors import Conflict, InvalidOperation, NotFound
from snapcircle.core.friendship.models import (
    FriendEntry,
    Friendship,
    FriendshipStatus,
    PendingRequest,
    UserProfile,
    UserSearchResult,
)
from snapcircle.core.friendship.notifications import (
    NotificationCommand,
    NotificationKinds,
    Outcome,
    friend_accepted_message,
    friend_request_message,
)
from snapcircle.core.friendship.transitions import (
    FriendshipAction,
    blocks_new_request,
    evaluate_transition,
)
from snapcircle.core.logging import get_logger
from snapcircle.db.relationship_store import (
    DuplicatePairError,
    RelationshipStore,
    pair_clause,
)
from snapcircle.db.user_directory import UserDirectory

logger = get_logger(__name__)

UNKNOWN_NICKNAME = "알 수 없음"


class FriendshipService:
    """친구 요청/수락/거절/취소/삭제, 친한 친구 토글, 목록·검색"""

    def __init__(
        self,
        store: RelationshipStore,
        users: UserDirectory,
        search_limit: Optional[int] = None,
    ) -> None:
        self._store = store
        self._users = users
        self._search_limit = (
            settings.SEARCH_RESULT_LIMIT if search_limit is None else search_limit
        )

    # ── 요청 ─────────────────────────────────────────────────

    def send_request(
        self, requester_id: int, receiver_id: int
    ) -> Outcome[Friendship]:
        """친구 요청 생성. 같은 쌍에 pending/accepted가 있으면 Conflict.

        rejected 레코드는 새 pending 레코드로 대체된다.
        """
        if requester_id == receiver_id:
            raise InvalidOperation("자기 자신에게 친구 요청을 보낼 수 없습니다.")

        receiver = self._users.find_by_id(receiver_id)
        if receiver is None:
            raise NotFound("사용자를 찾을 수 없습니다.")
        requester = self._users.find_by_id(requester_id)

        existing = self._store.find_pair(requester_id, receiver_id)
        if blocks_new_request(existing):
            if existing.status == FriendshipStatus.ACCEPTED:
                raise Conflict("이미 친구입니다.")
            raise Conflict("이미 친구 요청이 있습니다.")
        if existing is not None:
            # rejected → 교체
            self._store.delete(existing)

        try:
            friendship = self._store.create(requester_id, receiver_id)
        except DuplicatePairError:
            # 동시 요청이 먼저 삽입됨
            raise Conflict("이미 친구 요청이 있습니다.")

        logger.info(
            f"Friend request sent: {requester_id} → {receiver_id} "
            f"(friendship={friendship.friendship_id})"
        )
        nickname = requester.nickname if requester else UNKNOWN_NICKNAME
        return Outcome(
            result=friendship,
            notifications=[
                NotificationCommand(
                    user_id=receiver_id,
                    kind=NotificationKinds.FRIEND_REQUEST,
                    message=friend_request_message(nickname),
                )
            ],
        )

    def accept(
        self, request_id: int, acting_user_id: int
    ) -> Outcome[Friendship]:
        """받은 요청 수락 → 양쪽 모두에게 알림"""
        friendship = self._transition(
            request_id, FriendshipAction.ACCEPT, acting_user_id
        )

        profiles = self._users.find_many(
            [friendship.requester_id, friendship.receiver_id]
        )
        requester_name = _nickname(profiles.get(friendship.requester_id), "상대방")
        receiver_name = _nickname(profiles.get(friendship.receiver_id), "상대방")

        return Outcome(
            result=friendship,
            notifications=[
                NotificationCommand(
                    user_id=friendship.requester_id,
                    kind=NotificationKinds.FRIEND_ACCEPTED,
                    message=friend_accepted_message(receiver_name),
                ),
                NotificationCommand(
                    user_id=friendship.receiver_id,
                    kind=NotificationKinds.FRIEND_ACCEPTED,
                    message=friend_accepted_message(requester_name),
                ),
            ],
        )

    def decline(
        self, request_id: int, acting_user_id: int
    ) -> Outcome[Friendship]:
        """받은 요청 거절. 알림 없음."""
        friendship = self._transition(
            request_id, FriendshipAction.DECLINE, acting_user_id
        )
        return Outcome(result=friendship)

    def cancel(self, request_id: int, acting_user_id: int) -> Outcome[None]:
        """보낸 요청 취소 (요청자만 가능)"""
        self._transition(request_id, FriendshipAction.CANCEL, acting_user_id)
        return Outcome(result=None)

    def remove(self, user_id: int, friend_id: int) -> Outcome[None]:
        """친구 삭제. 양쪽 친한 친구 플래그도 함께 사라진다."""
        friendship = self._store.find_pair(user_id, friend_id)
        entry = (
            evaluate_transition(friendship, FriendshipAction.REMOVE, user_id)
            if friendship is not None
            else None
        )
        if entry is None:
            raise NotFound("친구 관계를 찾을 수 없습니다.")

        self._store.delete(friendship)
        logger.info(
            f"Friendship removed: {user_id} ✕ {friend_id} "
            f"(friendship={friendship.friendship_id})"
        )
        return Outcome(result=None)

    def toggle_close_friend(
        self, user_id: int, friend_id: int
    ) -> Outcome[bool]:
        """호출한 사용자 쪽 친한 친구 플래그만 뒤집고 새 값을 반환"""
        friendship = self.get_accepted(user_id, friend_id)
        if friendship is None:
            raise NotFound("친구 관계를 찾을 수 없습니다.")

        if friendship.requester_id == user_id:
            friendship.requester_close_friend = not friendship.requester_close_friend
        else:
            friendship.receiver_close_friend = not friendship.receiver_close_friend
        saved = self._store.save(friendship)

        is_close = saved.close_flag_of(user_id)
        logger.info(
            f"Close friend toggled: {user_id} → {friend_id} is_close_friend={is_close}"
        )
        return Outcome(result=is_close)

    # ── 조회 ─────────────────────────────────────────────────

    def get_friendship(self, user_a: int, user_b: int) -> Optional[Friendship]:
        """상태 무관 쌍 조회"""
        return self._store.find_pair(user_a, user_b)

    def get_accepted(self, user_a: int, user_b: int) -> Optional[Friendship]:
        friendship = self._store.find_pair(user_a, user_b)
        if friendship is None or not friendship.is_accepted:
            return None
        return friendship

    def accepted_friendships(self, user_id: int) -> List[Friendship]:
        return self._store.find_all(
            {"requester_id": user_id, "status": FriendshipStatus.ACCEPTED},
            {"receiver_id": user_id, "status": FriendshipStatus.ACCEPTED},
        )

    def list_friends(self, user_id: int) -> List[FriendEntry]:
        """친구 목록. is_close_friend는 user_id 쪽 플래그."""
        return self._to_friend_entries(user_id, self.accepted_friendships(user_id))

    def list_close_friends(self, user_id: int) -> List[FriendEntry]:
        friendships = self._store.find_all(
            {
                "requester_id": user_id,
                "status": FriendshipStatus.ACCEPTED,
                "requester_close_friend": True,
            },
            {
                "receiver_id": user_id,
                "status": FriendshipStatus.ACCEPTED,
                "receiver_close_friend": True,
            },
        )
        return self._to_friend_entries(user_id, friendships)

    def list_pending_received(self, user_id: int) -> List[PendingRequest]:
        """받은 요청, 최신순"""
        friendships = self._store.find_all(
            {"receiver_id": user_id, "status": FriendshipStatus.PENDING},
            order_by="requested_at",
            descending=True,
        )
        return self._to_pending(user_id, friendships)

    def list_pending_sent(self, user_id: int) -> List[PendingRequest]:
        """보낸 요청, 최신순"""
        friendships = self._store.find_all(
            {"requester_id": user_id, "status": FriendshipStatus.PENDING},
            order_by="requested_at",
            descending=True,
        )
        return self._to_pending(user_id, friendships)

    def search(self, query: str, excluding_user_id: int) -> List[UserSearchResult]:
        """닉네임/이메일 부분 일치 검색 + 관계 상태 표시.

        후보별 관계 조회는 한 번의 OR 쿼리로 묶고, 결과는 후보 순서를 따른다.
        """
        query = (query or "").strip()
        if not query:
            return []

        candidates = self._users.search(
            query, exclude_user_id=excluding_user_id, limit=self._search_limit
        )
        if not candidates:
            return []

        friendships = self._store.find_all(
            *[pair_clause(excluding_user_id, c.user_id) for c in candidates]
        )
        by_counterpart: Dict[int, Friendship] = {
            f.counterpart(excluding_user_id): f for f in friendships
        }

        results: List[UserSearchResult] = []
        for candidate in candidates:
            result = UserSearchResult(user=candidate)
            friendship = by_counterpart.get(candidate.user_id)
            if friendship is not None:
                if friendship.status == FriendshipStatus.ACCEPTED:
                    result.is_friend = True
                elif friendship.status == FriendshipStatus.PENDING:
                    if friendship.requester_id == excluding_user_id:
                        result.has_sent_request = True
                    else:
                        result.has_received_request = True
            results.append(result)
        return results

    # ── 내부 헬퍼 ────────────────────────────────────────────

    def _transition(
        self, request_id: int, action: FriendshipAction, acting_user_id: int
    ) -> Friendship:
        """요청 id 기반 전이 (accept/decline/cancel).

        레코드가 없거나, 상태가 맞지 않거나, 행위자가 해당 역할이 아니면
        모두 같은 NotFound.
        """
        friendship = self._store.find({"id": request_id})
        entry = (
            evaluate_transition(friendship, action, acting_user_id)
            if friendship is not None
            else None
        )
        if entry is None:
            raise NotFound("친구 요청을 찾을 수 없습니다.")

        if entry.next_status is None:
            self._store.delete(friendship)
            logger.info(
                f"Friend request {action.value}: friendship={request_id} "
                f"by user={acting_user_id} (deleted)"
            )
            return friendship

        old_status = friendship.status
        friendship.status = entry.next_status
        friendship.responded_at = datetime.now(timezone.utc)
        saved = self._store.save(friendship)
        logger.info(
            f"Friend request {action.value}: friendship={request_id} "
            f"by user={acting_user_id}, {old_status.value}→{saved.status.value}"
        )
        return saved

    def _to_friend_entries(
        self, user_id: int, friendships: List[Friendship]
    ) -> List[FriendEntry]:
        profiles = self._users.find_many(f.counterpart(user_id) for f in friendships)
        entries: List[FriendEntry] = []
        for friendship in friendships:
            profile = profiles.get(friendship.counterpart(user_id))
            if profile is None:
                logger.warning(
                    f"Friend profile missing: friendship={friendship.friendship_id}"
                )
                continue
            entries.append(
                FriendEntry(user=profile, is_close_friend=friendship.close_flag_of(user_id))
            )
        return entries

    def _to_pending(
        self, user_id: int, friendships: List[Friendship]
    ) -> List[PendingRequest]:
        profiles = self._users.find_many(f.counterpart(user_id) for f in friendships)
        requests: List[PendingRequest] = []
        for friendship in friendships:
            profile = profiles.get(friendship.counterpart(user_id))
            if profile is None:
                continue
            requests.append(
                PendingRequest(
                    friendship_id=friendship.friendship_id,
                    user=profile,
                    requested_at=friendship.requested_at,
                )
            )
        return requests


def _nickname(profile: Optional[UserProfile], fallback: str) -> str:
    return profile.nickname if profile is not None else fallback
