from __future__ import annotations

from collections.abc import Generator
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker


@pytest.fixture
def test_ctx(tmp_path, monkeypatch) -> Generator[dict, None, None]:
    import src.models.db as db_module
    from src.models.db import Base

    db_file = tmp_path / "test.db"
    test_url = f"sqlite:///{db_file}"
    engine = create_engine(test_url, connect_args={"check_same_thread": False}, future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    monkeypatch.setattr(db_module, "engine", engine, raising=False)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=False)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    from src.app import app

    with TestClient(app) as client:
        yield {
            "client": client,
            "session_local": TestingSessionLocal,
            "engine": engine,
        }

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(tmp_path) -> Generator[Session, None, None]:
    from src.models import tables  # noqa: F401
    from src.models.db import Base

    engine = create_engine(f"sqlite:///{tmp_path / 'repo.db'}", connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=engine)
    SessionForTest = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    with SessionForTest() as db:
        yield db

    engine.dispose()


@pytest.fixture
def make_holding():
    from src.models.holding import Holding

    def _make(**overrides) -> Holding:
        fields = {
            "symbol": "AAPL",
            "asset_name": "Apple Inc.",
            "asset_type": "Stock",
            "quantity": Decimal("10"),
            "purchase_price": Decimal("100.00"),
            "purchase_date": datetime(2024, 1, 15, 14, 30),
        }
        fields.update(overrides)
        return Holding(**fields)

    return _make
