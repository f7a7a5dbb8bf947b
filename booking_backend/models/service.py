"""Service model definitions."""

import uuid

from sqlalchemy import Column, Float, String, Text
from booking_backend.database import Base


class Service(Base):
    """A bookable service with an hourly price."""
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=False)
    duration_hours = Column(Float, nullable=False, default=1.0)
    minimum_duration_hours = Column(Float)
