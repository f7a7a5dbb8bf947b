import os
import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from booking_backend.database import Base  # noqa: E402
from booking_backend.models.availability import ProfessionalAvailability, ProfessionalBlockedDate  # noqa: E402, F401
from booking_backend.models.booking import Booking  # noqa: E402, F401
from booking_backend.models.service import Service  # noqa: E402
from booking_backend.models.user import Customer, ServiceProvider  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seed(db_session):
    """A provider, a customer and a one-hour service priced at 40 per hour."""
    provider = ServiceProvider(id=str(uuid.uuid4()), user_id='provider-user', business_name='Spotless')
    customer = Customer(id=str(uuid.uuid4()), user_id='customer-user', first_name='Ada', email='ada@example.com')
    service = Service(id=str(uuid.uuid4()), name='Window cleaning', price=40.0, duration_hours=1.0)
    db_session.add_all([provider, customer, service])
    db_session.commit()

    return SimpleNamespace(
        provider_id=provider.id,
        provider_user_id=provider.user_id,
        customer_id=customer.id,
        customer_user_id=customer.user_id,
        service_id=service.id,
    )
