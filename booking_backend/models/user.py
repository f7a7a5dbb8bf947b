"""Customer and service provider model definitions."""

import uuid

from sqlalchemy import Column, String
from booking_backend.database import Base


class ServiceProvider(Base):
    """Represents a professional offering services."""
    __tablename__ = "service_providers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), unique=True, index=True)
    business_name = Column(String)


class Customer(Base):
    """Represents a customer who books services."""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), unique=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    email = Column(String)
