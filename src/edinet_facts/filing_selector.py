"""Pick the best periodic report for a company among one date's submissions."""

from __future__ import annotations

from typing import Callable, Iterable

from edinet_facts.models import FilingMetadata

Predicate = Callable[[FilingMetadata], bool]

PERIODIC_FORM_TYPES = ("annual", "quarterly")

# Highest priority first.  The first predicate with any match wins.
SELECTION_PRIORITY: tuple[tuple[str, Predicate], ...] = (
    ("annual+xbrl", lambda f: f.form_type == "annual" and bool(f.xbrl_available)),
    ("annual", lambda f: f.form_type == "annual"),
    ("quarterly+xbrl", lambda f: f.form_type == "quarterly" and bool(f.xbrl_available)),
    ("quarterly", lambda f: f.form_type == "quarterly"),
)


def covers_fiscal_year(filing: FilingMetadata, fiscal_year: int) -> bool:
    """True unless the filing's declared period clearly belongs to another year.

    A fiscal year is named after the year its period starts in.  Filings
    without a declared period are given the benefit of the doubt.
    """
    if filing.period_start is None:
        return True
    return filing.period_start.year == fiscal_year


def select_best(
    filings: Iterable[FilingMetadata],
    company_id: str,
    fiscal_year: int | None = None,
) -> FilingMetadata | None:
    """Return the highest-priority periodic report of `company_id`, or None."""
    candidates = [
        f for f in filings
        if f.company_id == company_id
        and f.form_type in PERIODIC_FORM_TYPES
        and (fiscal_year is None or covers_fiscal_year(f, fiscal_year))
    ]
    if not candidates:
        return None

    for _, predicate in SELECTION_PRIORITY:
        for filing in candidates:
            if predicate(filing):
                return filing
    return None
