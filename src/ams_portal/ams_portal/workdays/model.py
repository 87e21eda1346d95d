from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Holiday:
    """Company holiday; tentative ones are shown but never affect computations."""

    holiday_id: int
    name: str
    date: date
    is_tentative: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.holiday_id,
            "name": self.name,
            "date": self.date.isoformat(),
            "isTentative": self.is_tentative,
        }


def confirmed_dates(holidays) -> frozenset[date]:
    return frozenset(h.date for h in holidays if not h.is_tentative)
