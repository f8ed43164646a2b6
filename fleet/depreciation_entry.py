"""DepreciationEntry class for booked value reductions."""

from datetime import date
from decimal import Decimal

from .guard import money, not_blank


class DepreciationEntry:
    """A single reduction of a vehicle's residual value."""

    def __init__(self, entry_date: date, amount: Decimal, reason: str):
        self.date = entry_date
        self.amount = money(amount, "Depreciation amount")
        self.reason = not_blank(reason, "Depreciation reason")

    def __repr__(self) -> str:
        return f"DepreciationEntry({self.date.isoformat()}, {self.amount}, {self.reason!r})"
