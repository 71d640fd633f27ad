"""Argument validation and calendar-window math for attribution runs."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from attribution_service.services.exceptions import InvalidArgumentError


def utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


def parse_organization_id(value: Any) -> uuid.UUID:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError("organization_id is required")
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise InvalidArgumentError(
            "organization_id must be a valid UUID", details={"organization_id": str(value)}
        ) from exc


def validate_days_back(value: Any, default: int) -> int:
    """Return ``value`` as a non-negative int, or ``default`` when it is None.

    JSON numbers such as ``7.0`` are accepted; booleans, fractions, strings
    and negatives are rejected.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidArgumentError("days_back must be a non-negative integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(
            "days_back must be a non-negative integer", details={"days_back": value}
        )
    return value


@dataclass(frozen=True)
class AttributionWindow:
    """Inclusive calendar range ``[start, end]`` considered by one run."""

    start: date
    end: date

    @classmethod
    def ending_on(cls, end: date, days_back: int) -> "AttributionWindow":
        try:
            start = end - timedelta(days=days_back)
        except OverflowError as exc:
            raise InvalidArgumentError(
                "days_back reaches past the earliest representable date",
                details={"days_back": days_back},
            ) from exc
        return cls(start=start, end=end)

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def end_before(self) -> datetime:
        """Exclusive upper bound: midnight after ``end``."""
        return datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=timezone.utc)


def link_covers(start_date: date | None, end_date: date | None, on: date) -> bool:
    """True when ``on`` falls inside a link's validity window. Missing bounds are open."""
    if start_date is not None and start_date > on:
        return False
    if end_date is not None and end_date < on:
        return False
    return True
