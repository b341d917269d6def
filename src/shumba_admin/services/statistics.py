"""Aggregate cards shown above the payments and bookings tables."""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


def _amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class PaymentSummary:
    total: int
    approved: int
    pending: int
    total_amount: float


@dataclass(frozen=True)
class BookingSummary:
    total: int
    available: int
    booked: int
    revenue: float


def payment_summary(records: Iterable[Mapping[str, Any]]) -> PaymentSummary:
    records = list(records)
    return PaymentSummary(
        total=len(records),
        approved=sum(1 for r in records if r.get("status") in ("paid", "approved")),
        pending=sum(1 for r in records if r.get("status") == "pending"),
        total_amount=round(sum(_amount(r.get("amount")) for r in records), 2),
    )


def booking_summary(records: Iterable[Mapping[str, Any]]) -> BookingSummary:
    records = list(records)
    return BookingSummary(
        total=len(records),
        available=sum(1 for r in records if r.get("status") == "available"),
        booked=sum(1 for r in records if r.get("status") == "booked"),
        revenue=round(sum(_amount(r.get("price")) for r in records), 2),
    )
