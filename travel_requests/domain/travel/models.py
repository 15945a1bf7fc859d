from sqlalchemy import (
    Column, String, Date, DateTime, Enum, Integer, Index,
)

from travel_requests.db.connection import Base
from .status import TravelRequestStatus
from .entities import TravelRequestEntity


class TravelRequest(Base):
    __tablename__ = "travel_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(String(64), nullable=False, index=True)
    requester_name = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False, index=True)
    departure_date = Column(Date, nullable=False, index=True)
    return_date = Column(Date, nullable=False, index=True)
    status = Column(
        Enum(TravelRequestStatus, name="travel_request_status"),
        nullable=False,
        default=TravelRequestStatus.REQUESTED,
        index=True,
    )
    approved_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    cancelled_by = Column(String(64), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_travel_requests_travel_window", "departure_date", "return_date"),
    )

    def to_entity(self) -> TravelRequestEntity:
        return TravelRequestEntity(
            id=self.id,
            requester_id=self.requester_id,
            requester_name=self.requester_name,
            destination=self.destination,
            departure_date=self.departure_date,
            return_date=self.return_date,
            status=self.status,
            approved_by=self.approved_by,
            approved_at=self.approved_at,
            cancelled_by=self.cancelled_by,
            cancelled_at=self.cancelled_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
