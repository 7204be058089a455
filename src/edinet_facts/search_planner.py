"""Candidate submission dates to probe, most likely first.

EDINET can only be listed one submission date at a time, so finding a
company or a filing means guessing dates.  Three strategies, cheapest first:

  RECENT      — today back N days weekly + the last 12 month-ends
                (company discovery)
  FISCAL      — filing-season heuristics for one fiscal year
  EXHAUSTIVE  — every month-end in a ±N-year band around the fiscal year end

Everything here is calendar math: no I/O, deterministic for a given `today`.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import Enum


class Strategy(str, Enum):
    RECENT = "recent"
    FISCAL = "fiscal"
    EXHAUSTIVE = "exhaustive"


# ═══════════════════════════════════════════════════════════════════════════
#  Fiscal season table
#  (months relative to fiscal year end, day)
#    day > 0   → that day of the month
#    day <= 0  → offset back from the month's last day (0 = month end)
#  Order is priority order.
# ═══════════════════════════════════════════════════════════════════════════

# Annual reports are due within 3 months of year end; most land in the
# last two weeks of that month (late June for March year ends).
ANNUAL_SEASON: tuple[tuple[int, int], ...] = tuple((3, -d) for d in range(0, 12))

# Quarterly reports are due 45 days after quarter end, i.e. mid second
# month.  Latest in-year quarter first.
QUARTERLY_SEASON: tuple[tuple[int, int], ...] = tuple(
    (months, day)
    for months in (-1, -4, -7)
    for day in (14, 13, 12, 11, 10)
)

FISCAL_SEASON: tuple[tuple[int, int], ...] = ANNUAL_SEASON + QUARTERLY_SEASON


# ═══════════════════════════════════════════════════════════════════════════
#  Calendar helpers
# ═══════════════════════════════════════════════════════════════════════════

def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Return (year, month) shifted by `months` (may be negative)."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def fiscal_year_end(fiscal_year: int, fiscal_year_end_month: int = 3) -> date:
    """Last day of fiscal year `fiscal_year`.

    A fiscal year is named after the calendar year it starts in, so with a
    March year end FY2022 runs April 2022 – March 2023.  A December year end
    closes within the same calendar year.
    """
    if fiscal_year_end_month == 12:
        return month_end(fiscal_year, 12)
    return month_end(fiscal_year + 1, fiscal_year_end_month)


def _season_date(anchor: date, months: int, day: int) -> date:
    year, month = shift_month(anchor.year, anchor.month, months)
    last = month_end(year, month)
    if day > 0:
        return last.replace(day=min(day, last.day))
    return last - timedelta(days=-day)


def _finalize(dates: list[date], today: date, *, reverse_chronological: bool) -> list[date]:
    """Drop future dates and duplicates; optionally sort newest first."""
    seen: set[date] = set()
    out: list[date] = []
    for d in dates:
        if d > today or d in seen:
            continue
        seen.add(d)
        out.append(d)
    if reverse_chronological:
        out.sort(reverse=True)
    return out


# ═══════════════════════════════════════════════════════════════════════════
#  Planner
# ═══════════════════════════════════════════════════════════════════════════

class SearchWindowPlanner:
    """Generates a fresh, ordered, deduplicated date list per call."""

    def __init__(
        self,
        *,
        recent_window_days: int = 90,
        recent_months: int = 12,
        fiscal_year_end_month: int = 3,
        sweep_band_years: int = 2,
        fiscal_season: tuple[tuple[int, int], ...] = FISCAL_SEASON,
    ):
        self.recent_window_days = recent_window_days
        self.recent_months = recent_months
        self.fiscal_year_end_month = fiscal_year_end_month
        self.sweep_band_years = sweep_band_years
        self.fiscal_season = fiscal_season

    def plan(
        self,
        strategy: Strategy,
        *,
        today: date | None = None,
        fiscal_year: int | None = None,
    ) -> list[date]:
        today = today or date.today()
        if strategy == Strategy.RECENT:
            return self.recent(today)
        if fiscal_year is None:
            raise ValueError(f"{strategy.value} plan needs a fiscal_year")
        if strategy == Strategy.FISCAL:
            return self.fiscal(fiscal_year, today)
        if strategy == Strategy.EXHAUSTIVE:
            return self.exhaustive(fiscal_year, today)
        raise ValueError(f"Unknown strategy: {strategy!r}")

    def recent(self, today: date) -> list[date]:
        dates = [today - timedelta(days=d) for d in range(0, self.recent_window_days + 1, 7)]
        for i in range(self.recent_months + 1):
            year, month = shift_month(today.year, today.month, -i)
            dates.append(month_end(year, month))
        return _finalize(dates, today, reverse_chronological=True)

    def fiscal(self, fiscal_year: int, today: date) -> list[date]:
        anchor = fiscal_year_end(fiscal_year, self.fiscal_year_end_month)
        dates = [_season_date(anchor, months, day) for months, day in self.fiscal_season]
        return _finalize(dates, today, reverse_chronological=False)

    def exhaustive(self, fiscal_year: int, today: date) -> list[date]:
        anchor = fiscal_year_end(fiscal_year, self.fiscal_year_end_month)
        band = self.sweep_band_years * 12
        dates = []
        for offset in range(-band, band + 1):
            year, month = shift_month(anchor.year, anchor.month, offset)
            dates.append(month_end(year, month))
        return _finalize(dates, today, reverse_chronological=True)
