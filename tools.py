import calendar
import datetime
import math
from typing import Iterable, List, Optional

# Keeps week starts and the few days added around a fast inside date.min/max.
MIN_YEAR = 1900
MAX_YEAR = 9998


class MathTools:
    """Provides small numeric helpers for tracker calculations."""

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def is_finite(value: Optional[float]) -> bool:
        """Return ``True`` when ``value`` is a real, finite number."""
        if value is None or isinstance(value, bool):
            return False
        try:
            return math.isfinite(value)
        except TypeError:
            return False

    @classmethod
    def mean(cls, values: Iterable[Optional[float]]) -> Optional[float]:
        """Average of the finite entries in ``values`` or ``None`` if none."""
        finite = [v for v in values if cls.is_finite(v)]
        if not finite:
            return None
        return sum(finite) / len(finite)


class WeightTools:
    """Parse raw weight input coming from forms and the CLI."""

    @staticmethod
    def parse(raw: object) -> Optional[float]:
        """Return ``raw`` as a finite float, ``None`` for blank or bad input."""
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                return None
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return None
        return value if math.isfinite(value) else None


class DateTools:
    """Calendar conventions shared by every tracker service.

    Weeks start on Sunday and are keyed by the ISO date of that Sunday;
    months are keyed as ``YYYY-MM``.
    """

    @staticmethod
    def format(date: datetime.date) -> str:
        return date.isoformat()

    @staticmethod
    def parse(value: str) -> datetime.date:
        """Parse a strict ``YYYY-MM-DD`` string within the supported years."""
        if not isinstance(value, str):
            raise ValueError("date must be in YYYY-MM-DD format")
        try:
            parsed = datetime.datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            raise ValueError("date must be in YYYY-MM-DD format")
        if parsed.isoformat() != value:
            raise ValueError("date must be in YYYY-MM-DD format")
        if not MIN_YEAR <= parsed.year <= MAX_YEAR:
            raise ValueError(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
        return parsed

    @classmethod
    def is_valid(cls, value: str) -> bool:
        try:
            cls.parse(value)
        except ValueError:
            return False
        return True

    @classmethod
    def add_days(cls, value: str, amount: int) -> str:
        return cls.format(cls.parse(value) + datetime.timedelta(days=amount))

    @staticmethod
    def week_start(date: datetime.date) -> datetime.date:
        # isoweekday: Monday=1 ... Sunday=7
        return date - datetime.timedelta(days=date.isoweekday() % 7)

    @classmethod
    def week_key(cls, value: str) -> str:
        return cls.format(cls.week_start(cls.parse(value)))

    @classmethod
    def week_key_for(cls, date: datetime.date) -> str:
        return cls.format(cls.week_start(date))

    @staticmethod
    def month_key_for(date: datetime.date) -> str:
        return f"{date.year:04d}-{date.month:02d}"

    @classmethod
    def month_key(cls, value: str) -> str:
        return cls.month_key_for(cls.parse(value))

    @classmethod
    def parse_week_key(cls, week_key: str) -> datetime.date:
        start = cls.parse(week_key)
        if cls.week_start(start) != start:
            raise ValueError("week key must be the ISO date of a Sunday")
        return start

    @staticmethod
    def parse_month_key(month_key: str) -> tuple[int, int]:
        """Return ``(year, month)`` for a ``YYYY-MM`` key."""
        parts = month_key.split("-") if isinstance(month_key, str) else []
        if (
            len(parts) != 2
            or len(parts[0]) != 4
            or len(parts[1]) != 2
            or not parts[0].isdigit()
            or not parts[1].isdigit()
        ):
            raise ValueError("month key must be in YYYY-MM format")
        year, month = int(parts[0]), int(parts[1])
        if not 1 <= month <= 12:
            raise ValueError("month key must be in YYYY-MM format")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
        return year, month

    @classmethod
    def days_in_month(cls, month_key: str) -> int:
        year, month = cls.parse_month_key(month_key)
        return calendar.monthrange(year, month)[1]

    @classmethod
    def week_dates(cls, week_key: str) -> List[str]:
        start = cls.parse_week_key(week_key)
        return [cls.format(start + datetime.timedelta(days=i)) for i in range(7)]

    @classmethod
    def date_range(cls, end: str, days: int) -> List[str]:
        """Return ``days`` consecutive ISO dates ending at and including ``end``."""
        end_date = cls.parse(end)
        # stop at the first supported day instead of running off the calendar
        available = (end_date - datetime.date(MIN_YEAR, 1, 1)).days + 1
        days = min(max(days, 0), available)
        return [
            cls.format(end_date - datetime.timedelta(days=days - 1 - i))
            for i in range(days)
        ]

    @classmethod
    def fast_start_bounds(cls, month_key: str) -> tuple[str, str]:
        """Earliest and latest start date that fits a 3-day run in the month."""
        last = cls.days_in_month(month_key)
        return f"{month_key}-01", f"{month_key}-{last - 2:02d}"

    @classmethod
    def consecutive_run(cls, start: str, length: int = 3) -> List[str]:
        return [cls.add_days(start, offset) for offset in range(length)]
