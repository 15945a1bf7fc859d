"""Seed demo travel requests in every status.

Usage:
    python -m travel_requests.scripts.seed --per-user 3
"""

from __future__ import annotations

import argparse
import asyncio
import random
from datetime import timedelta

from travel_requests.config import settings
from travel_requests.db.connection import SessionLocal, create_tables
from travel_requests.domain.travel.entities import Actor, NewTravelRequest
from travel_requests.domain.travel.repository import TravelRequestRepository
from travel_requests.domain.travel.status import TravelRequestStatus
from travel_requests.observability.tracing import log_event
from travel_requests.runtime.service import TravelRequestService
from travel_requests.runtime.utils import utcnow

DEMO_USERS = [
    Actor(id="test-user", name="Test User"),
    Actor(id="admin-user", name="Admin User"),
    Actor(id="maria", name="Maria Souza"),
    Actor(id="joao", name="Joao Lima"),
]

DESTINATIONS = [
    "São Paulo", "Rio de Janeiro", "Lisbon", "New York", "Buenos Aires",
    "Santiago", "Berlin", "Tokyo", "Belo Horizonte", "Recife",
]


async def seed(per_user: int, rng: random.Random) -> dict[str, int]:
    counts = {status.value: 0 for status in TravelRequestStatus}
    db = SessionLocal()
    try:
        service = TravelRequestService(
            repository=TravelRequestRepository(db),
            business_timezone=settings.business_tzinfo,
        )
        today = utcnow().date()

        for requester in DEMO_USERS:
            deciders = [u for u in DEMO_USERS if u.id != requester.id]
            for _ in range(per_user):
                departure = today + timedelta(days=rng.randint(1, 90))
                request = service.create_request(
                    requester,
                    NewTravelRequest(
                        destination=rng.choice(DESTINATIONS),
                        departure_date=departure,
                        return_date=departure + timedelta(days=rng.randint(1, 14)),
                    ),
                )

                # REQUESTED, APPROVED, approved-then-cancelled, CANCELLED
                outcome = rng.randint(0, 3)
                if outcome in (1, 2):
                    await service.change_status(rng.choice(deciders), request.id, TravelRequestStatus.APPROVED)
                if outcome in (2, 3):
                    await service.change_status(rng.choice(deciders), request.id, TravelRequestStatus.CANCELLED)

                final = service.get_request(requester, request.id)
                counts[final.status.value] += 1
    finally:
        db.close()

    return counts


async def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--per-user', type=int, default=3)
    parser.add_argument('--seed', type=int, default=None, help='random seed for reproducible data')
    args = parser.parse_args()

    create_tables()
    counts = await seed(args.per_user, random.Random(args.seed))
    log_event('seed.done', users=len(DEMO_USERS), counts=counts)


if __name__ == '__main__':
    asyncio.run(main())
