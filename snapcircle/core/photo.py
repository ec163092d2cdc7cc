"""사진 도메인 모델"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Photo:
    """사진 메타데이터.

    visibility는 저장된 원문 문자열 그대로 둔다. 알 수 없는 값은
    공개 범위 판정에서 비공개로 처리된다.
    """

    photo_id: int
    owner_id: int
    url: str
    visibility: str
    storage_key: Optional[str] = None
    created_at: Optional[datetime] = None
