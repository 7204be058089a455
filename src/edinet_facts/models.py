"""Pydantic models shared across the pipeline."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Company & filing basics
# ---------------------------------------------------------------------------

class CompanyCandidate(BaseModel):
    """A company seen in the submission index, keyed by its EDINET code."""

    model_config = ConfigDict(frozen=True)

    id: str
    legal_name: str
    submitter_name: str | None = None
    securities_code: str | None = None
    tax_id: str | None = None
    last_seen_date: date


FormType = Literal["annual", "quarterly", "other"]


class FilingMetadata(BaseModel):
    filing_id: str
    company_id: str | None = None
    form_code: str | None = None
    form_type: FormType = "other"
    submit_date: str | None = None
    description: str | None = None
    xbrl_available: bool | None = None
    filer_name: str | None = None
    submitter_name: str | None = None
    securities_code: str | None = None
    tax_id: str | None = None
    period_start: date | None = None
    period_end: date | None = None


class ArchivePayload(BaseModel):
    """Raw ZIP body of one document download. Never persisted."""

    filing_id: str
    doc_type: int
    content_type: str = ""
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)


# ---------------------------------------------------------------------------
# Extraction results
# ---------------------------------------------------------------------------

class TemporalContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["instant", "duration"]


class FactSetMetadata(BaseModel):
    filing_id: str | None = None
    submit_date: str | None = None
    found_date: date | None = None
    filer_name: str | None = None
    description: str | None = None
    source: Literal["xbrl", "csv"] | None = None
    entry_name: str | None = None


class FinancialFactSet(BaseModel):
    """Normalized facts for one filing.  None means no tag spelling resolved."""

    balance_sheet: dict[str, float | None] = Field(default_factory=dict)
    profit_loss: dict[str, float | None] = Field(default_factory=dict)
    cash_flow: dict[str, float | None] = Field(default_factory=dict)
    metadata: FactSetMetadata = Field(default_factory=FactSetMetadata)
    sources: dict[str, str | None] = Field(default_factory=dict)  # which tag matched
    contexts: dict[str, str] = Field(default_factory=dict)

    def resolved_count(self) -> int:
        return sum(
            1
            for section in (self.balance_sheet, self.profit_loss, self.cash_flow)
            for v in section.values()
            if v is not None
        )


class YearResult(BaseModel):
    """One entry of a multi-year batch.  Either facts or error is set."""

    year: int
    facts: FinancialFactSet | None = None
    error: str | None = None
    dates_tried: int = 0
