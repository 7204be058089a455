"""Per-year filing search and extraction engine.

Each requested fiscal year is driven through a small state machine:

  SEARCHING → FILING_FOUND → FETCHING → PARSING → EXTRACTING → DONE
      ↑______________________________________________|  (recoverable error)
  SEARCHING → NOT_FOUND_FOR_YEAR                        (date budget spent)

Data flow for one year:
  1. SearchWindowPlanner → FISCAL dates, then EXHAUSTIVE dates not yet tried
  2. EdinetClient.list_documents() + select_best() → the filing
  3. ArchiveFetcher.fetch() → ZIP payload
  4. ArchiveParser.parse() → StructuredDocument
  5. FactExtractor.extract() → FinancialFactSet

The decision of which state comes next lives in next_state(), a pure
function; YearlyDataAggregator only performs the I/O of each state.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field

from edinet_facts.archive_fetcher import ArchiveFetcher
from edinet_facts.archive_parser import ArchiveParser, StructuredDocument
from edinet_facts.edinet_client import EdinetClient
from edinet_facts.errors import (
    AuthError,
    CorruptArchiveError,
    EdinetError,
    ExtractionError,
    FetchError,
    NoStructuredDataError,
    TransientError,
)
from edinet_facts.filing_selector import select_best
from edinet_facts.financials import FactExtractor
from edinet_facts.models import (
    ArchivePayload,
    FactSetMetadata,
    FilingMetadata,
    FinancialFactSet,
    YearResult,
)
from edinet_facts.search_planner import SearchWindowPlanner, Strategy

log = logging.getLogger(__name__)


class YearState(str, Enum):
    SEARCHING = "searching"
    FILING_FOUND = "filing_found"
    FETCHING = "fetching"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    DONE = "done"
    NOT_FOUND_FOR_YEAR = "not_found_for_year"


TERMINAL_STATES = (YearState.DONE, YearState.NOT_FOUND_FOR_YEAR)

# Failures that abandon the current date/filing and resume searching
RECOVERABLE_ERRORS: tuple[type[Exception], ...] = (
    TransientError,
    FetchError,
    CorruptArchiveError,
    NoStructuredDataError,
    ExtractionError,
)

_ADVANCE = {
    YearState.FILING_FOUND: YearState.FETCHING,
    YearState.FETCHING: YearState.PARSING,
    YearState.PARSING: YearState.EXTRACTING,
    YearState.EXTRACTING: YearState.DONE,
}


def _searching_or_exhausted(attempts: int, budget: int) -> YearState:
    return YearState.SEARCHING if attempts < budget else YearState.NOT_FOUND_FOR_YEAR


def next_state(
    state: YearState,
    *,
    attempts: int,
    budget: int,
    error: BaseException | type[BaseException] | None = None,
    found: bool = True,
) -> YearState:
    """Decide the state after one step.  No I/O.

    Args:
        state: State whose step just ran.
        attempts: Dates probed so far for this year.
        budget: Total dates the year may probe.
        error: The exception (or exception class) the step raised, if any.
        found: For SEARCHING, whether the probed date held a usable filing.

    Raises AuthError for an auth failure and re-raises any error that is
    not in RECOVERABLE_ERRORS.
    """
    if state in TERMINAL_STATES:
        return state

    if error is not None:
        kind = error if isinstance(error, type) else type(error)
        if issubclass(kind, AuthError) or not issubclass(kind, RECOVERABLE_ERRORS):
            if isinstance(error, BaseException):
                raise error
            raise kind(f"{kind.__name__} while {state.value}")
        return _searching_or_exhausted(attempts, budget)

    if state is YearState.SEARCHING:
        return YearState.FILING_FOUND if found else _searching_or_exhausted(attempts, budget)
    return _ADVANCE[state]


class YearOutcome(BaseModel):
    """Terminal result of one year's run."""

    state: YearState
    facts: FinancialFactSet | None = None
    dates_tried: int = 0
    errors: list[str] = Field(default_factory=list)


class YearlyDataAggregator:
    """Drives the per-year state machine for one or many fiscal years."""

    def __init__(
        self,
        client: EdinetClient,
        planner: SearchWindowPlanner | None = None,
        *,
        fetcher: ArchiveFetcher | None = None,
        parser: ArchiveParser | None = None,
        extractor: FactExtractor | None = None,
        fiscal_date_budget: int = 30,
        sweep_date_budget: int = 60,
    ):
        self.client = client
        self.planner = planner or SearchWindowPlanner()
        self.fetcher = fetcher or ArchiveFetcher(client)
        self.parser = parser or ArchiveParser()
        self.extractor = extractor or FactExtractor()
        self.fiscal_date_budget = fiscal_date_budget
        self.sweep_date_budget = sweep_date_budget

    def plan_dates(self, fiscal_year: int, today: date | None = None) -> list[date]:
        """FISCAL dates first, then EXHAUSTIVE dates not already planned."""
        fiscal = self.planner.plan(Strategy.FISCAL, today=today, fiscal_year=fiscal_year)
        fiscal = fiscal[: self.fiscal_date_budget]
        seen = set(fiscal)
        sweep = [
            d for d in self.planner.plan(Strategy.EXHAUSTIVE, today=today, fiscal_year=fiscal_year)
            if d not in seen
        ]
        return fiscal + sweep[: self.sweep_date_budget]

    # ── Single year ───────────────────────────────────────────────────

    def run(self, company_id: str, fiscal_year: int, *, today: date | None = None) -> YearOutcome:
        """Search, fetch, parse and extract one fiscal year.

        Never raises for a missing year: budget exhaustion is reported as
        NOT_FOUND_FOR_YEAR.  AuthError propagates.
        """
        dates = self.plan_dates(fiscal_year, today)
        budget = len(dates)
        log.info(
            "FY%d %s: searching up to %d date(s)", fiscal_year, company_id, budget,
        )

        state = YearState.SEARCHING
        attempts = 0
        errors: list[str] = []
        day: date | None = None
        filing: FilingMetadata | None = None
        payload: ArchivePayload | None = None
        doc: StructuredDocument | None = None
        facts: FinancialFactSet | None = None

        while state not in TERMINAL_STATES:
            error: EdinetError | None = None
            found = True
            try:
                if state is YearState.SEARCHING:
                    if attempts >= budget:
                        found = False
                    else:
                        day = dates[attempts]
                        attempts += 1
                        filing = select_best(self.client.list_documents(day), company_id, fiscal_year)
                        found = filing is not None
                        if found:
                            log.info(
                                "FY%d %s: %s filing %s found on %s",
                                fiscal_year, company_id, filing.form_type, filing.filing_id, day,
                            )
                        else:
                            log.debug("FY%d %s: nothing on %s", fiscal_year, company_id, day)
                elif state is YearState.FETCHING:
                    payload = self.fetcher.fetch(filing.filing_id)
                elif state is YearState.PARSING:
                    doc = self.parser.parse(payload)
                elif state is YearState.EXTRACTING:
                    facts = self.extractor.extract(doc, self._metadata(filing, day))
            except AuthError:
                log.error("FY%d %s: authentication failed; aborting", fiscal_year, company_id)
                raise
            except RECOVERABLE_ERRORS as exc:
                log.warning(
                    "FY%d %s: %s failed on %s: %s",
                    fiscal_year, company_id, state.value, day, exc,
                )
                errors.append(f"{day} {state.value}: {exc}")
                error = exc

            state = next_state(state, attempts=attempts, budget=budget, error=error, found=found)

        if state is YearState.NOT_FOUND_FOR_YEAR:
            log.info(
                "FY%d %s: no usable filing after %d date(s)", fiscal_year, company_id, attempts,
            )
            facts = None
        return YearOutcome(state=state, facts=facts, dates_tried=attempts, errors=errors)

    @staticmethod
    def _metadata(filing: FilingMetadata, day: date | None) -> FactSetMetadata:
        return FactSetMetadata(
            filing_id=filing.filing_id,
            submit_date=filing.submit_date,
            found_date=day,
            filer_name=filing.filer_name,
            description=filing.description,
        )

    # ── Many years ────────────────────────────────────────────────────

    def _year_result(self, company_id: str, year: int, today: date | None) -> YearResult:
        try:
            outcome = self.run(company_id, year, today=today)
        except AuthError:
            raise
        except Exception as exc:
            log.warning("FY%d %s: extraction failed: %s", year, company_id, exc)
            return YearResult(year=year, error=str(exc))

        if outcome.facts is None:
            return YearResult(
                year=year,
                error=f"No financial data found for FY{year} after {outcome.dates_tried} date(s)",
                dates_tried=outcome.dates_tried,
            )
        return YearResult(year=year, facts=outcome.facts, dates_tried=outcome.dates_tried)

    def run_many(
        self,
        company_id: str,
        years: Iterable[int],
        max_workers: int = 1,
        *,
        today: date | None = None,
    ) -> list[YearResult]:
        """Run several years; results follow the requested order.

        Per-year failures become YearResult.error.  AuthError aborts the
        whole batch.  Workers share the client's RateLimiter.
        """
        years = list(years)
        if max_workers <= 1 or len(years) <= 1:
            return [self._year_result(company_id, y, today) for y in years]

        results: list[YearResult | None] = [None] * len(years)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self._year_result, company_id, y, today): i
                for i, y in enumerate(years)
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except AuthError:
                for future in futures:
                    future.cancel()
                raise
        return [r for r in results if r is not None]
