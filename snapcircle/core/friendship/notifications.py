"""알림 커맨드

서비스는 알림을 직접 보내지 않고 커맨드 목록을 결과와 함께 돌려준다.
호출 측이 트랜잭션 커밋 후 실행한다.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class NotificationKinds:
    """알림 유형 문자열 상수"""

    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"
    PHOTO_SHARED = "photo_shared"


@dataclass(frozen=True)
class NotificationCommand:
    user_id: int
    kind: str
    message: str


@dataclass
class Outcome(Generic[T]):
    """변경 결과 + 커밋 후 실행할 알림과 정리 작업

    after_commit: blob 삭제처럼 롤백으로 되돌릴 수 없는 부수 효과.
    """

    result: T
    notifications: List[NotificationCommand] = field(default_factory=list)
    after_commit: List[Callable[[], None]] = field(default_factory=list)


def friend_request_message(requester_nickname: str) -> str:
    return f"{requester_nickname}님이 친구 요청을 보냈습니다."


def friend_accepted_message(other_nickname: str) -> str:
    return f"{other_nickname}님과 친구가 되었습니다."


def photo_shared_message(owner_nickname: str) -> str:
    return f"{owner_nickname}님이 사진을 앨범에 등록했습니다."
