"""Shared fixtures: an in-memory database per test and a frozen local clock."""

from datetime import datetime

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lumi.db.base import Base
from lumi import models  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def kolkata():
    return pytz.timezone("Asia/Kolkata")


@pytest.fixture
def at(kolkata):
    """Build an aware local datetime: at(2025, 10, 20, 10, 0)"""

    def _at(year, month, day, hour=0, minute=0):
        return kolkata.localize(datetime(year, month, day, hour, minute))

    return _at
