import re
from datetime import date, time

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)


def is_valid_uuid(value: str | None) -> bool:
    if not value:
        return False
    return UUID_PATTERN.match(value) is not None


def parse_iso_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``. Raises ValueError for anything else."""
    if not re.fullmatch(r'\d{4}-\d{2}-\d{2}', value.strip()):
        raise ValueError(f'Invalid date: {value!r}')
    return date.fromisoformat(value.strip())


def parse_clock(value) -> time | None:
    """Parse a wall-clock time such as ``09:00`` or ``09:00:00``.

    Returns None for missing or unparseable input so callers can skip bad rows.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = time.fromisoformat(value.strip())
    except ValueError:
        return None

    return parsed.replace(second=0, microsecond=0, tzinfo=None)


def format_clock(value: time) -> str:
    return value.strftime('%H:%M')
