"""Notification Service — 알림 전달과 조회

- NotificationSink: 알림 한 건 전달 인터페이스
- NotificationDispatcher: 커밋 후 알림 커맨드 실행. 실패는 로그만 남긴다.
- commit_and_dispatch: 커밋 → 알림 → after_commit 정리 작업
- NotificationService: 읽지 않은 알림 조회, 읽음 처리
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from snapcircle.core.errors import NotFound
from snapcircle.core.friendship.notifications import (
    NotificationCommand,
    Outcome,
)
from snapcircle.core.logging import get_logger
from snapcircle.db.models import NotificationModel

logger = get_logger(__name__)


@dataclass
class Notification:
    notification_id: int
    user_id: int
    kind: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class NotificationSink(ABC):
    """알림 전달 채널. best-effort."""

    @abstractmethod
    def notify(self, user_id: int, message: str, kind: str) -> None:
        ...


class DatabaseNotificationSink(NotificationSink):
    """notifications 테이블에 기록"""

    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def notify(self, user_id: int, message: str, kind: str) -> None:
        self._db.add(NotificationModel(user_id=user_id, kind=kind, message=message))
        try:
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise


class NotificationDispatcher:
    """알림 커맨드 실행기

    사용 패턴:
        outcome = friendship_service.accept(request_id, user_id)
        commit_and_dispatch(db, outcome, dispatcher)
    """

    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink

    def dispatch(self, commands: Iterable[NotificationCommand]) -> int:
        """커맨드를 순서대로 실행. 전달 성공 건수 반환."""
        delivered = 0
        for command in commands:
            try:
                self._sink.notify(command.user_id, command.message, command.kind)
                delivered += 1
            except Exception:
                logger.exception(
                    f"Notification dispatch failed: user={command.user_id} "
                    f"kind={command.kind}"
                )
        return delivered


def commit_and_dispatch(
    db_session: Session,
    outcome: Outcome,
    dispatcher: NotificationDispatcher,
) -> Outcome:
    """작업 단위를 커밋한 다음에만 알림과 정리 작업을 실행한다.

    커밋 전에 호출 측이 롤백하면 outcome을 버리면 된다.
    """
    db_session.commit()
    dispatcher.dispatch(outcome.notifications)
    for task in outcome.after_commit:
        try:
            task()
        except Exception:
            logger.exception(f"After-commit task failed: {task!r}")
    return outcome


class NotificationService:
    def __init__(self, db_session: Session) -> None:
        self._db = db_session

    def list_unread(self, user_id: int) -> List[Notification]:
        """읽지 않은 알림, 최신순"""
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        return [self._notification_from_orm(r) for r in self._db.scalars(stmt)]

    def mark_as_read(self, notification_id: int, user_id: int) -> Notification:
        """본인 알림만 읽음 처리 가능"""
        row = self._db.get(NotificationModel, notification_id)
        if row is None or row.user_id != user_id:
            raise NotFound("알림을 찾을 수 없습니다.")
        row.is_read = True
        self._db.flush()
        return self._notification_from_orm(row)

    @staticmethod
    def _notification_from_orm(model: NotificationModel) -> Notification:
        return Notification(
            notification_id=model.id,
            user_id=model.user_id,
            kind=model.kind,
            message=model.message,
            is_read=bool(model.is_read),
            created_at=model.created_at,
        )
