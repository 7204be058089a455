"""Error taxonomy for the EDINET pipeline.

Callers decide what to do by exception class, never by message text:

  AuthError              — fatal, aborts the whole operation
  TransientError         — one request failed; try the next date/variant
  TransientSearchError   — one date listing failed
  FetchError             — every download variant for a filing was rejected
  CorruptArchiveError    — ZIP could not be opened, even after repair
  NoStructuredDataError  — no XBRL instance and no CSV rendition in the ZIP
  ExtractionError        — the structured entry could not be parsed at all
  FilingNotFoundError    — search budget for a fiscal year exhausted
"""

from __future__ import annotations


class EdinetError(Exception):
    """Base class for every error raised by edinet_facts."""


class AuthError(EdinetError):
    """Subscription key missing or rejected by the upstream."""


class TransientError(EdinetError):
    """Non-auth failure of a single request (transport, HTTP, size, decode)."""


class TransientSearchError(TransientError):
    """Listing the submissions of one date failed."""

    def __init__(self, message: str, date: str | None = None):
        super().__init__(message)
        self.date = date


class FetchError(EdinetError):
    """All document-type variants failed validation."""

    def __init__(self, filing_id: str, attempts: list[tuple[int, str]]):
        self.filing_id = filing_id
        self.attempts = list(attempts)
        tried = ", ".join(f"type={t} ({reason})" for t, reason in self.attempts)
        super().__init__(f"No usable archive for {filing_id}; tried {tried or 'nothing'}")

    @property
    def attempted_types(self) -> list[int]:
        return [t for t, _ in self.attempts]


class CorruptArchiveError(EdinetError):
    """Container unopenable even after end-of-central-directory repair."""


class NoStructuredDataError(EdinetError):
    """Neither the primary XBRL entry nor the CSV fallback was found."""

    def __init__(self, entry_names: list[str]):
        self.entry_names = list(entry_names)
        listing = ", ".join(self.entry_names[:50])
        more = f" (+{len(self.entry_names) - 50} more)" if len(self.entry_names) > 50 else ""
        super().__init__(f"No XBRL or CSV entry in archive. Entries: {listing or '<empty>'}{more}")


class ExtractionError(EdinetError):
    """The structured document could not be read into a tree or table."""


class FilingNotFoundError(EdinetError):
    """No usable filing for the fiscal year within the search budget."""

    def __init__(self, company_id: str, fiscal_year: int, dates_tried: int):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        self.dates_tried = dates_tried
        super().__init__(
            f"No financial data found for {company_id} FY{fiscal_year} "
            f"after {dates_tried} date(s)"
        )
