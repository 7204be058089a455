"""Fuzzy company discovery over the date-indexed submission list.

EDINET has no company search.  We walk the RECENT plan date by date, list
submissions, and match filer/submitter names against the query with three
layers (any layer on either name field is a match):

  (a) case-insensitive substring
  (b) substring after stripping legal-entity suffixes (株式会社, Co., Ltd., …)
  (c) substring after NFKC width folding, casefold and whitespace removal
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date

from edinet_facts.edinet_client import EdinetClient
from edinet_facts.errors import TransientSearchError
from edinet_facts.models import CompanyCandidate, FilingMetadata
from edinet_facts.search_planner import SearchWindowPlanner, Strategy

log = logging.getLogger(__name__)

# Longest first so "Co., Ltd." is removed before "Ltd."
LEGAL_SUFFIXES: tuple[str, ...] = (
    "株式会社", "有限会社", "合同会社", "合資会社", "合名会社",
    "（株）", "(株)", "㈱", "（有）", "(有)", "㈲",
    "co., ltd.", "co.,ltd.", "co. ltd.", "co., ltd", "co ltd",
    "corporation", "incorporated", "company", "limited",
    "inc.", "inc", "corp.", "corp", "ltd.", "ltd",
    "k.k.", "kk",
)

_SPACE_RE = re.compile(r"\s+")
_EDGE_PUNCT = " \t,.・　"


def _strip_suffixes(text: str) -> str:
    """Remove legal-entity suffixes/prefixes from a lowercased name."""
    out = text
    for suffix in sorted(LEGAL_SUFFIXES, key=len, reverse=True):
        if suffix.isascii():
            # Word-bounded for latin suffixes so "Inc" inside a word survives
            out = re.sub(rf"(?<![a-z0-9]){re.escape(suffix)}(?![a-z0-9])", " ", out)
        else:
            out = out.replace(suffix, " ")
    return _SPACE_RE.sub(" ", out).strip(_EDGE_PUNCT)


def _fold(text: str) -> str:
    return unicodedata.normalize("NFKC", text).casefold()


def normalize_name(text: str) -> str:
    """Width/case folding: full-width → half-width, casefold, drop spaces."""
    return _SPACE_RE.sub("", _fold(text))


def name_matches(query: str, name: str | None) -> bool:
    """Layered substring match of `query` inside `name`."""
    if not name or not query:
        return False

    q_lower = query.lower().strip()
    n_lower = name.lower()
    if q_lower and q_lower in n_lower:
        return True

    q_bare = _strip_suffixes(q_lower)
    if q_bare and q_bare in _strip_suffixes(n_lower):
        return True

    q_norm = normalize_name(_strip_suffixes(_fold(query)))
    n_norm = normalize_name(_strip_suffixes(_fold(name)))
    return bool(q_norm) and q_norm in n_norm


def filing_matches(query: str, filing: FilingMetadata) -> bool:
    return name_matches(query, filing.filer_name) or name_matches(query, filing.submitter_name)


class CompanyResolver:
    """Find companies whose filings match a name, deduplicated by EDINET code."""

    def __init__(
        self,
        client: EdinetClient,
        planner: SearchWindowPlanner | None = None,
        *,
        date_budget: int = 20,
        min_company_count: int = 1,
    ):
        self.client = client
        self.planner = planner or SearchWindowPlanner()
        self.date_budget = date_budget
        self.min_company_count = min_company_count

    def resolve(self, name_query: str, *, today: date | None = None) -> list[CompanyCandidate]:
        """Scan recent submission dates for companies matching `name_query`.

        AuthError propagates immediately.  A failed date is logged and
        skipped.  Returns [] when nothing matched within the date budget.
        """
        query = name_query.strip()
        if not query:
            return []

        dates = self.planner.plan(Strategy.RECENT, today=today)[: self.date_budget]
        companies: dict[str, CompanyCandidate] = {}

        for probed, day in enumerate(dates, start=1):
            try:
                filings = self.client.list_documents(day)
            except TransientSearchError as exc:
                log.warning("Company search: skipping %s: %s", day, exc)
                continue

            for filing in filings:
                if not filing.company_id or not filing_matches(query, filing):
                    continue
                self._merge(companies, filing, day)

            if len(companies) >= self.min_company_count:
                log.info(
                    "Company search '%s': %d match(es) after %d date(s)",
                    query, len(companies), probed,
                )
                break
        else:
            log.info(
                "Company search '%s': budget of %d date(s) exhausted, %d match(es)",
                query, len(dates), len(companies),
            )

        return list(companies.values())

    @staticmethod
    def _merge(companies: dict[str, CompanyCandidate], filing: FilingMetadata, day: date) -> None:
        existing = companies.get(filing.company_id)
        if existing is None:
            companies[filing.company_id] = CompanyCandidate(
                id=filing.company_id,
                legal_name=filing.filer_name or filing.submitter_name or filing.company_id,
                submitter_name=filing.submitter_name,
                securities_code=filing.securities_code,
                tax_id=filing.tax_id,
                last_seen_date=day,
            )
            return

        # First sighting wins; later sightings only fill gaps
        updates = {}
        if existing.securities_code is None and filing.securities_code:
            updates["securities_code"] = filing.securities_code
        if existing.tax_id is None and filing.tax_id:
            updates["tax_id"] = filing.tax_id
        if existing.submitter_name is None and filing.submitter_name:
            updates["submitter_name"] = filing.submitter_name
        if updates:
            companies[filing.company_id] = existing.model_copy(update=updates)
