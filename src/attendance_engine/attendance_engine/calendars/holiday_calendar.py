from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

import holidays

from ..core.constants import DEFAULT_HOLIDAY_COUNTRY, DEFAULT_SPECIAL_HOLIDAY_NAMES
from ..core.enums import HolidayType


@dataclass(frozen=True)
class HolidayInfo:
    is_holiday: bool
    holiday_type: Optional[HolidayType] = None
    holiday_name: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict = {"is_holiday": self.is_holiday}
        if self.is_holiday:
            out["holiday_type"] = self.holiday_type.value if self.holiday_type else None
            out["holiday_name"] = self.holiday_name
        return out


NOT_A_HOLIDAY = HolidayInfo(is_holiday=False)


class HolidayCalendar(ABC):
    """Regional holiday source used by CalendarClassifier."""

    @abstractmethod
    def lookup(self, day: date) -> HolidayInfo:
        raise NotImplementedError


class HolidaysLibraryCalendar(HolidayCalendar):
    """Holidays from the `holidays` package for one country (default: Philippines).

    The package does not say which days are "special"; a holiday counts as
    special when its name contains "special" or one of `special_names`.
    Without `special_names` the country defaults from constants apply.
    """

    def __init__(self, country: str = DEFAULT_HOLIDAY_COUNTRY, *, special_names: Optional[Iterable[str]] = None):
        self._calendar = holidays.country_holidays(country)
        if special_names is None:
            special_names = DEFAULT_SPECIAL_HOLIDAY_NAMES.get(country.upper(), ())
        self._special_names = {name.strip().lower() for name in special_names if name and name.strip()}

    def lookup(self, day: date) -> HolidayInfo:
        names = self._calendar.get_list(day)
        if not names:
            return NOT_A_HOLIDAY
        return HolidayInfo(is_holiday=True, holiday_type=self._classify(names), holiday_name="; ".join(names))

    def _classify(self, names: list[str]) -> HolidayType:
        for name in names:
            lowered = name.lower()
            if "special" in lowered or any(special in lowered for special in self._special_names):
                return HolidayType.SPECIAL
        return HolidayType.REGULAR


class StaticHolidayCalendar(HolidayCalendar):
    """Explicit date -> (name, type) table, e.g. company holidays or tests."""

    def __init__(self, entries: Mapping[date, tuple[str, HolidayType | str]] | None = None):
        self._entries = {d: (name, HolidayType(kind)) for d, (name, kind) in (entries or {}).items()}

    def lookup(self, day: date) -> HolidayInfo:
        entry = self._entries.get(day)
        if entry is None:
            return NOT_A_HOLIDAY
        name, kind = entry
        return HolidayInfo(is_holiday=True, holiday_type=kind, holiday_name=name)
