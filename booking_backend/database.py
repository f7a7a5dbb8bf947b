import logging
from dataclasses import dataclass
from threading import Lock

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import declarative_base, sessionmaker

from booking_backend.core import config

logger = logging.getLogger(__name__)

AVAILABILITY_TABLE = 'professional_availability'
BLOCKED_DATES_TABLE = 'professional_blocked_dates'

connect_args = {'check_same_thread': False} if config.DATABASE_URL.startswith('sqlite') else {}

engine = create_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


@dataclass(frozen=True)
class OptionalSchema:
    """Which optional scheduling tables exist in the connected database."""
    has_availability_table: bool = True
    has_blocked_dates_table: bool = True


_schema_lock = Lock()
_optional_schema: OptionalSchema | None = None


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def inspect_optional_schema(bind) -> OptionalSchema:
    table_names = set(inspect(bind).get_table_names())
    return OptionalSchema(
        has_availability_table=AVAILABILITY_TABLE in table_names,
        has_blocked_dates_table=BLOCKED_DATES_TABLE in table_names,
    )


def detect_optional_schema() -> OptionalSchema:
    global _optional_schema

    if _optional_schema is not None:
        return _optional_schema

    with _schema_lock:
        if _optional_schema is not None:
            return _optional_schema

        schema = inspect_optional_schema(engine)
        if not schema.has_availability_table:
            logger.info('%s table not found, default availability will be used', AVAILABILITY_TABLE)
        if not schema.has_blocked_dates_table:
            logger.info('%s table not found, no dates will be blocked', BLOCKED_DATES_TABLE)

        _optional_schema = schema
        return schema


def reset_optional_schema() -> None:
    global _optional_schema

    with _schema_lock:
        _optional_schema = None
