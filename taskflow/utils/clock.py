import math
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current UTC time as a naive datetime with whole-second resolution"""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def utc_today() -> date:
    return utc_now().date()


def round_half_up(value: float, ndigits: int = 0) -> float:
    # round() in Python rounds halves to even; scores and durations round halves up
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def get_clock():
    """FastAPI dependency supplying the service clock"""
    return utc_now
