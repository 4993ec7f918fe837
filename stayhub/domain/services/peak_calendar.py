from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from stayhub.domain.entities.peak_season import PeakSeason


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def expand_peak_dates(seasons: Iterable[PeakSeason]) -> list[date]:
    days: set[date] = set()
    for season in seasons:
        current = season.start_date
        while current <= season.end_date:
            days.add(current)
            current += timedelta(days=1)
    return sorted(days)
