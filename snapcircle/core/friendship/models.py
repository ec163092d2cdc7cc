"""친구 관계 도메인 모델

DB 무관 순수 데이터 클래스.
쌍(pair)은 항상 (작은 id, 큰 id)로 정규화해서 저장·조회한다.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class FriendshipStatus(str, Enum):
    """친구 요청 상태 3단계"""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def canonical_pair(user_a: int, user_b: int) -> Tuple[int, int]:
    """순서 없는 쌍 → (min, max)"""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


@dataclass
class Friendship:
    """친구 관계 레코드

    requester_close_friend: 요청자가 받는 사람을 친한 친구로 지정했는지
    receiver_close_friend: 받는 사람이 요청자를 친한 친구로 지정했는지
    """

    friendship_id: int
    requester_id: int
    receiver_id: int
    status: FriendshipStatus = FriendshipStatus.PENDING
    requested_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    requester_close_friend: bool = False
    receiver_close_friend: bool = False

    @property
    def pair(self) -> Tuple[int, int]:
        return canonical_pair(self.requester_id, self.receiver_id)

    @property
    def is_accepted(self) -> bool:
        return self.status == FriendshipStatus.ACCEPTED

    def involves(self, user_id: int) -> bool:
        return user_id in (self.requester_id, self.receiver_id)

    def counterpart(self, user_id: int) -> int:
        """user_id 기준 상대방 id"""
        if user_id == self.requester_id:
            return self.receiver_id
        if user_id == self.receiver_id:
            return self.requester_id
        raise ValueError(f"User {user_id} is not part of friendship {self.friendship_id}")

    def close_flag_of(self, user_id: int) -> bool:
        """user_id 쪽 친한 친구 플래그 (user_id가 상대를 친한 친구로 지정했는지)"""
        if user_id == self.requester_id:
            return self.requester_close_friend
        if user_id == self.receiver_id:
            return self.receiver_close_friend
        raise ValueError(f"User {user_id} is not part of friendship {self.friendship_id}")


@dataclass
class UserProfile:
    """UserDirectory가 제공하는 표시용 사용자 정보"""

    user_id: int
    nickname: str
    email: str = ""
    profile_image_url: Optional[str] = None


@dataclass
class FriendEntry:
    """친구 목록 항목. is_close_friend는 조회한 사용자 기준."""

    user: UserProfile
    is_close_friend: bool


@dataclass
class PendingRequest:
    """받은/보낸 친구 요청 목록 항목. user는 상대방."""

    friendship_id: int
    user: UserProfile
    requested_at: Optional[datetime]


@dataclass
class UserSearchResult:
    """사용자 검색 결과 + 검색한 사용자와의 관계 상태"""

    user: UserProfile
    is_friend: bool = False
    has_sent_request: bool = False
    has_received_request: bool = False
