"""
Type Conversion Utilities.

Provides the small set of conversions the client needs when talking to
Fortnox: integer coercion of error codes and the normalization of
"last modified" timespans into the ``YYYY-MM-DD HH:MM`` form Fortnox expects.

Usage:
    from fortie.core.converters import safe_int, DateConverter

    code = safe_int(envelope.get("Code"))
    lastmodified = DateConverter.to_lastmodified("-2 days")
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Callable

LASTMODIFIED_FORMAT = "%Y-%m-%d %H:%M"

_RELATIVE_UNITS = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
}

# "-2 days", "+3 hours", "2 weeks ago"
_RELATIVE_PATTERN = re.compile(
    r"^(?P<sign>[+-])?\s*(?P<amount>\d+)\s*(?P<unit>minute|hour|day|week)s?(?P<ago>\s+ago)?$"
)

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class ValueConverter:
    """
    Unified value conversion utilities.
    """

    @staticmethod
    def to_int(
        value: Any,
        default: int | None = None,
    ) -> int | None:
        """
        Safely convert value to integer.

        Args:
            value: Input value to convert
            default: Default value if conversion fails

        Returns:
            Converted integer or default value
        """
        if value is None:
            return default

        if isinstance(value, bool):
            return default

        if isinstance(value, int):
            return value

        if isinstance(value, float):
            return int(value)

        if isinstance(value, str):
            cleaned = value.strip()
            if not cleaned:
                return default
            try:
                return int(cleaned)
            except ValueError:
                return default

        return default


class DateConverter:
    """
    Date conversion utilities.

    Handles absolute timestamps as well as the relative expressions the
    Fortnox "lastmodified" filter is usually fed with.
    """

    COMMON_FORMATS = [
        "%Y-%m-%d %H:%M",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M",
    ]

    @classmethod
    def to_datetime(
        cls,
        value: Any,
        default: datetime | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> datetime | None:
        """
        Safely convert value to datetime.

        Args:
            value: datetime, date, absolute timestamp or relative expression
            default: Default value if conversion fails
            now: Reference clock for relative expressions

        Returns:
            Converted datetime or default value

        Examples:
            >>> DateConverter.to_datetime("2019-03-10 12:39")
            datetime.datetime(2019, 3, 10, 12, 39)
        """
        if value is None:
            return default

        if isinstance(value, datetime):
            return value

        if isinstance(value, date):
            return datetime.combine(value, datetime.min.time())

        if not isinstance(value, str):
            return default

        cleaned = value.strip()
        if not cleaned:
            return default

        for fmt in cls.COMMON_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt)
            except ValueError:
                continue

        relative = cls._parse_relative(cleaned.lower(), now())
        if relative is not None:
            return relative

        return default

    @staticmethod
    def _parse_relative(expression: str, reference: datetime) -> datetime | None:
        midnight = reference.replace(hour=0, minute=0, second=0, microsecond=0)

        if expression == "now":
            return reference
        if expression == "today":
            return midnight
        if expression == "yesterday":
            return midnight - timedelta(days=1)

        match = _RELATIVE_PATTERN.match(expression)
        if match:
            delta = _RELATIVE_UNITS[match.group("unit")] * int(match.group("amount"))
            if match.group("sign") == "-" or match.group("ago"):
                return reference - delta
            return reference + delta

        if expression.startswith("last "):
            weekday = expression[len("last "):]
            if weekday in _WEEKDAYS:
                days_back = (midnight.weekday() - _WEEKDAYS.index(weekday)) % 7 or 7
                return midnight - timedelta(days=days_back)

        return None

    @classmethod
    def to_lastmodified(
        cls,
        value: Any,
        now: Callable[[], datetime] = datetime.now,
    ) -> str | None:
        """
        Render a timespan as a Fortnox ``lastmodified`` value.

        Unparseable strings are passed through untouched so Fortnox can
        report them.
        """
        if value is None:
            return None

        parsed = cls.to_datetime(value, now=now)
        if parsed is None:
            return str(value)
        return parsed.strftime(LASTMODIFIED_FORMAT)


def safe_int(
    value: Any,
    default: int | None = None,
) -> int | None:
    """Convenience function for ValueConverter.to_int."""
    return ValueConverter.to_int(value, default)
