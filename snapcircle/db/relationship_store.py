"""RelationshipStore — 친구 관계 레코드 영속화

서비스는 이 인터페이스만 의존한다. 구현은 ORM ↔ Core 변환을 책임진다.

조건(clause)은 필드=값 dict이며 dict 내부는 AND, 여러 dict는 OR로 결합한다.
    store.find_all(
        {"requester_id": 1, "status": "accepted"},
        {"receiver_id": 1, "status": "accepted"},
    )
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from snapcircle.core.friendship.models import (
    Friendship,
    FriendshipStatus,
    canonical_pair,
)
from snapcircle.core.logging import get_logger
from snapcircle.db.models import FriendshipModel

logger = get_logger(__name__)

Clause = Dict[str, Any]

QUERYABLE_FIELDS = frozenset(
    {
        "id",
        "requester_id",
        "receiver_id",
        "user_low_id",
        "user_high_id",
        "status",
        "requester_close_friend",
        "receiver_close_friend",
    }
)
ORDERABLE_FIELDS = frozenset({"id", "requested_at", "responded_at"})


class DuplicatePairError(Exception):
    """같은 쌍에 레코드가 이미 있어 유니크 제약에 걸림"""


def pair_clause(user_a: int, user_b: int) -> Clause:
    low, high = canonical_pair(user_a, user_b)
    return {"user_low_id": low, "user_high_id": high}


class RelationshipStore(ABC):
    """친구 관계 레코드 CRUD 인터페이스"""

    @abstractmethod
    def find(self, *clauses: Clause) -> Optional[Friendship]:
        ...

    @abstractmethod
    def find_all(
        self,
        *clauses: Clause,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Friendship]:
        ...

    @abstractmethod
    def create(
        self,
        requester_id: int,
        receiver_id: int,
        status: FriendshipStatus = FriendshipStatus.PENDING,
    ) -> Friendship:
        """DuplicatePairError: 같은 쌍 레코드가 이미 존재"""
        ...

    @abstractmethod
    def save(self, record: Friendship) -> Friendship:
        ...

    @abstractmethod
    def delete(self, record: Friendship) -> None:
        ...

    def find_pair(self, user_a: int, user_b: int) -> Optional[Friendship]:
        """순서 없는 쌍으로 조회 (상태 무관)"""
        return self.find(pair_clause(user_a, user_b))


class SqlRelationshipStore(RelationshipStore):
    """SQLAlchemy Session 기반 구현. flush까지만 하고 커밋은 호출 측 몫."""

    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    # ── 조회 ─────────────────────────────────────────────────

    def find(self, *clauses: Clause) -> Optional[Friendship]:
        stmt = self._select(clauses).order_by(FriendshipModel.id).limit(1)
        row = self._db.scalars(stmt).first()
        if row is None:
            return None
        return self._friendship_from_orm(row)

    def find_all(
        self,
        *clauses: Clause,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Friendship]:
        stmt = self._select(clauses)
        if order_by is not None:
            if order_by not in ORDERABLE_FIELDS:
                raise ValueError(f"Unsupported order field: {order_by}")
            column = getattr(FriendshipModel, order_by)
            if descending:
                stmt = stmt.order_by(column.desc(), FriendshipModel.id.desc())
            else:
                stmt = stmt.order_by(column.asc(), FriendshipModel.id.asc())
        else:
            stmt = stmt.order_by(FriendshipModel.id)
        return [self._friendship_from_orm(r) for r in self._db.scalars(stmt)]

    # ── 변경 ─────────────────────────────────────────────────

    def create(
        self,
        requester_id: int,
        receiver_id: int,
        status: FriendshipStatus = FriendshipStatus.PENDING,
    ) -> Friendship:
        low, high = canonical_pair(requester_id, receiver_id)
        row = FriendshipModel(
            requester_id=requester_id,
            receiver_id=receiver_id,
            user_low_id=low,
            user_high_id=high,
            status=status.value,
            requester_close_friend=False,
            receiver_close_friend=False,
        )
        try:
            # 실패 시 이 INSERT만 되돌리고 호출 측 작업 단위는 유지
            with self._db.begin_nested():
                self._db.add(row)
                self._db.flush()
        except IntegrityError as exc:
            logger.warning(
                f"Friendship insert rejected by unique pair constraint: "
                f"{requester_id} → {receiver_id}"
            )
            raise DuplicatePairError(f"{low}:{high}") from exc
        return self._friendship_from_orm(row)

    def save(self, record: Friendship) -> Friendship:
        row = self._get_row(record.friendship_id)
        row.status = record.status.value
        row.responded_at = record.responded_at
        row.requester_close_friend = record.requester_close_friend
        row.receiver_close_friend = record.receiver_close_friend
        self._db.flush()
        return self._friendship_from_orm(row)

    def delete(self, record: Friendship) -> None:
        row = self._get_row(record.friendship_id)
        self._db.delete(row)
        self._db.flush()

    # ── ORM ↔ Core 변환 ─────────────────────────────────────

    @staticmethod
    def _friendship_from_orm(model: FriendshipModel) -> Friendship:
        """ORM → Core Friendship"""
        return Friendship(
            friendship_id=model.id,
            requester_id=model.requester_id,
            receiver_id=model.receiver_id,
            status=FriendshipStatus(model.status),
            requested_at=model.requested_at,
            responded_at=model.responded_at,
            requester_close_friend=bool(model.requester_close_friend),
            receiver_close_friend=bool(model.receiver_close_friend),
        )

    # ── 내부 헬퍼 ────────────────────────────────────────────

    def _get_row(self, friendship_id: int) -> FriendshipModel:
        row = self._db.get(FriendshipModel, friendship_id)
        if row is None:
            raise ValueError(f"Friendship not found: {friendship_id}")
        return row

    @staticmethod
    def _select(clauses: tuple):
        stmt = select(FriendshipModel)
        if not clauses:
            return stmt
        conditions = []
        for clause in clauses:
            parts = []
            for field_name, value in clause.items():
                if field_name not in QUERYABLE_FIELDS:
                    raise ValueError(f"Unsupported filter field: {field_name}")
                if isinstance(value, Enum):
                    value = value.value
                parts.append(getattr(FriendshipModel, field_name) == value)
            conditions.append(and_(*parts))
        return stmt.where(or_(*conditions))
