from __future__ import annotations

import logging
from datetime import date
from typing import IO, Sequence, Union

import pandas as pd

from ..common.datetime_utils import to_ist_date
from ..common.validators import require_non_empty
from ..core.enums import MANAGER_ROLES, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Holiday, confirmed_dates
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


def _truthy(value) -> bool:
    if pd.isna(value):
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "y"}


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_year(self, year: int) -> Sequence[Holiday]:
        return self._holidays.list_between(start=date(year, 1, 1), end=date(year, 12, 31))

    def list_between(self, start: date, end: date) -> Sequence[Holiday]:
        return self._holidays.list_between(start=start, end=end)

    def confirmed_dates_between(self, start: date, end: date) -> frozenset[date]:
        return confirmed_dates(self._holidays.list_between(start=start, end=end, include_tentative=False))

    def add(self, *, current_role: Role, name: str, holiday_date: date, is_tentative: bool = False) -> int:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can manage holidays")
        name = require_non_empty(name, "Holiday name")
        return self._holidays.create(name=name, holiday_date=holiday_date, is_tentative=is_tentative)

    def delete(self, *, current_role: Role, holiday_id: int) -> None:
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can manage holidays")
        if not self._holidays.delete(int(holiday_id)):
            raise NotFoundError("Holiday not found")

    def import_excel(self, *, current_role: Role, source: Union[str, IO[bytes]]) -> int:
        """Bulk-create holidays from a sheet with Name / Date (/ Tentative) columns."""
        if current_role not in MANAGER_ROLES:
            raise AuthorizationError("Only Admin or HR can manage holidays")

        frame = pd.read_excel(source, engine="openpyxl")
        frame.columns = [str(c).strip().lower() for c in frame.columns]
        if not {"name", "date"}.issubset(frame.columns):
            raise ValidationError("Sheet must contain 'Name' and 'Date' columns")

        created = 0
        for _, row in frame.dropna(subset=["name", "date"]).iterrows():
            value = row["date"]
            holiday_date = value.date() if isinstance(value, pd.Timestamp) else to_ist_date(str(value))
            tentative = "tentative" in frame.columns and _truthy(row["tentative"])
            self._holidays.create(name=str(row["name"]).strip(), holiday_date=holiday_date, is_tentative=tentative)
            created += 1

        logger.info("Imported %d holidays", created)
        return created
