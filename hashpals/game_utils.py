"""
HashPals - Utilities

Small pure helpers shared by the engine and the host: clamping, wall-clock
reads and calendar-day arithmetic in local time.
"""

import datetime
import time


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp a value between lo and hi bounds."""
    return lo if value < lo else hi if value > hi else value


def round_stat(value: float) -> float:
    """Stats are kept at two decimal places."""
    return round(value, 2)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def local_day(ms: int) -> datetime.date:
    """Calendar date (local time) that an epoch-ms timestamp falls on."""
    return datetime.datetime.fromtimestamp(ms / 1000.0).date()


def midnight_of(day: datetime.date) -> int:
    return int(datetime.datetime.combine(day, datetime.time()).timestamp() * 1000)


def local_midnight_ms(ms: int) -> int:
    """Local midnight at the start of the day containing ``ms``."""
    return midnight_of(local_day(ms))


def previous_midnight_ms(ms: int) -> int:
    """Local midnight at the start of the day before the one containing ``ms``."""
    return midnight_of(local_day(ms) - datetime.timedelta(days=1))


def generate_random_coins(rng, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi]."""
    return rng.randint(lo, hi)


def format_number(num) -> str:
    """Compact coin display (e.g. '1.5K', '2.0M')."""
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)
