"""공용 테스트 fixture"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from snapcircle.db.database import build_engine, get_db
from snapcircle.db.models import Base, UserModel
from snapcircle.main import app


@pytest.fixture()
def session() -> Session:
    """테이블이 생성된 인메모리 DB 세션 (FK, SAVEPOINT 활성화). 테스트마다 새 DB."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture()
def client(session: Session) -> TestClient:
    """get_db를 테스트 세션으로 바꾼 TestClient"""
    app.dependency_overrides[get_db] = lambda: session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def make_user(session: Session):
    """테스트용 사용자 삽입 → id 반환"""

    def _make(nickname: str, email: str | None = None) -> int:
        user = UserModel(
            nickname=nickname,
            email=email or f"{nickname.lower()}@example.com",
        )
        session.add(user)
        session.flush()
        return user.id

    return _make
