"""Shared test fixtures: in-memory database, sessions and request factory."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from travel_requests.db.connection import Base
from travel_requests.domain.travel.entities import Actor
from travel_requests.domain.travel.models import TravelRequest
from travel_requests.domain.travel.repository import TravelRequestRepository
from travel_requests.domain.travel.status import TravelRequestStatus
from travel_requests.runtime.utils import utcnow


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repository(db_session):
    return TravelRequestRepository(db_session)


@pytest.fixture
def alice() -> Actor:
    return Actor(id="alice", name="Alice Requester")


@pytest.fixture
def bob() -> Actor:
    return Actor(id="bob", name="Bob Approver")


@pytest.fixture
def carol() -> Actor:
    return Actor(id="carol", name="Carol Manager")


@pytest.fixture
def today() -> date:
    return utcnow().date()


@pytest.fixture
def make_request(db_session, today):
    """Insert a row directly, in any status, like a model factory would."""

    def _make(
        requester_id: str = "alice",
        *,
        destination: str = "Lisbon",
        departure_date: date | None = None,
        return_date: date | None = None,
        status: TravelRequestStatus = TravelRequestStatus.REQUESTED,
        created_at: datetime | None = None,
        **fields,
    ):
        departure = departure_date or today + timedelta(days=10)
        requester_name = fields.pop("requester_name", requester_id.title())
        created = created_at or utcnow()
        row = TravelRequest(
            requester_id=requester_id,
            requester_name=requester_name,
            destination=destination,
            departure_date=departure,
            return_date=return_date or departure + timedelta(days=5),
            status=status,
            created_at=created,
            updated_at=created,
            **fields,
        )
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row.to_entity()

    return _make
