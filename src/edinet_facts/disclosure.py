"""EDINET disclosure wrapper: the public entry points of edinet_facts.

Module-level functions backed by lazily created, shared components so every
caller goes through the same client and the same RateLimiter.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from edinet_facts.archive_fetcher import ArchiveFetcher
from edinet_facts.company_resolver import CompanyResolver
from edinet_facts.config import get_config
from edinet_facts.edinet_client import get_edinet_client
from edinet_facts.errors import AuthError, FilingNotFoundError
from edinet_facts.historical import YearState, YearlyDataAggregator
from edinet_facts.models import CompanyCandidate, FilingMetadata, FinancialFactSet, YearResult
from edinet_facts.search_planner import SearchWindowPlanner

_planner: SearchWindowPlanner | None = None
_resolver: CompanyResolver | None = None
_aggregator: YearlyDataAggregator | None = None


def _get_planner() -> SearchWindowPlanner:
    global _planner
    if _planner is None:
        config = get_config()
        _planner = SearchWindowPlanner(
            recent_window_days=config.recent_window_days,
            fiscal_year_end_month=config.fiscal_year_end_month,
            sweep_band_years=config.sweep_band_years,
        )
    return _planner


def _get_resolver() -> CompanyResolver:
    global _resolver
    if _resolver is None:
        config = get_config()
        _resolver = CompanyResolver(
            get_edinet_client(),
            _get_planner(),
            date_budget=config.discovery_date_budget,
            min_company_count=config.min_company_count,
        )
    return _resolver


def _get_aggregator() -> YearlyDataAggregator:
    global _aggregator
    if _aggregator is None:
        config = get_config()
        client = get_edinet_client()
        _aggregator = YearlyDataAggregator(
            client,
            _get_planner(),
            fetcher=ArchiveFetcher(client, config.document_types),
            fiscal_date_budget=config.fiscal_date_budget,
            sweep_date_budget=config.sweep_date_budget,
        )
    return _aggregator


def resolve_company(name_query: str) -> list[CompanyCandidate]:
    """Search recent submissions for companies whose name matches."""
    return _get_resolver().resolve(name_query)


def get_fiscal_year_facts(company_id: str, fiscal_year: int) -> FinancialFactSet:
    """Normalized financial facts for one company and fiscal year.

    Raises FilingNotFoundError when the search budget is exhausted and
    AuthError when the subscription key is rejected.
    """
    outcome = _get_aggregator().run(company_id, fiscal_year)
    if outcome.state is not YearState.DONE or outcome.facts is None:
        raise FilingNotFoundError(company_id, fiscal_year, outcome.dates_tried)
    return outcome.facts


def get_multi_year_facts(
    company_id: str,
    fiscal_years: Iterable[int],
    max_workers: int = 1,
) -> list[YearResult]:
    """One YearResult per requested year, in the requested order."""
    return _get_aggregator().run_many(company_id, fiscal_years, max_workers=max_workers)


def check_connection() -> dict:
    return get_edinet_client().check_connection()


def list_documents(day: date | str) -> list[FilingMetadata]:
    """Raw submission list for one date (debugging aid)."""
    return get_edinet_client().list_documents(day)


def describe_error(exc: BaseException) -> dict:
    """Map an exception to a user-facing category and message."""
    if isinstance(exc, AuthError):
        return {
            "category": "auth",
            "message": "EDINET rejected the subscription key; check credentials (EDINET_API_KEY).",
            "detail": str(exc),
        }
    if isinstance(exc, FilingNotFoundError):
        return {
            "category": "not_found",
            "message": (
                f"No data found for FY{exc.fiscal_year} after {exc.dates_tried} date(s); "
                f"try another year or date range."
            ),
            "detail": str(exc),
            "fiscal_year": exc.fiscal_year,
            "dates_tried": exc.dates_tried,
        }
    return {
        "category": "failure",
        "message": f"Request failed ({type(exc).__name__}).",
        "detail": str(exc)[:300],
    }
