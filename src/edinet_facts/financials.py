"""Financial fact extraction from a parsed EDINET document.

Two-pass resolution per line item:
  Pass 1 — Context resolution: pick the instant and duration contexts that
           represent the period being reported (non-dimensional, current
           period marker) with CurrentYear* defaults
  Pass 2 — Tag fallback: among the item's tag spellings, take a numeric
           entry whose context has the kind the item's statement requires;
           an exact context match in any spelling beats a current-period
           marker, which beats any other entry; spelling order breaks ties

Data flow:
  1. ArchiveParser.parse() → StructuredDocument (XBRL tree or CSV table)
  2. _index_xbrl() / _index_csv() → facts grouped by "prefix:LocalName"
  3. resolve_contexts() → instant/duration context ids
  4. _resolve_item() → value + matched tag for every FinancialItem
  5. FinancialFactSet with per-statement dicts (None = not found)

Missing items never raise; only a document with neither a tree nor a table
does.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from typing import Any, Iterable, NamedTuple

import pandas as pd
from lxml import etree

from edinet_facts.archive_parser import StructuredDocument
from edinet_facts.errors import ExtractionError
from edinet_facts.models import FactSetMetadata, FinancialFactSet, TemporalContext
from edinet_facts.xbrl_mappings import (
    CURRENT_PERIOD_MARKERS,
    DEFAULT_DURATION_CONTEXT,
    DEFAULT_INSTANT_CONTEXT,
    FinancialItem,
    Statement,
    row_labels,
    tag_spellings,
)

log = logging.getLogger(__name__)

XBRLI_NS = "http://www.xbrl.org/2003/instance"
XSI_NIL = "{http://www.w3.org/2001/XMLSchema-instance}nil"

# Namespace URI fragment → canonical prefix used in the tag tables
_NAMESPACE_PREFIXES: tuple[tuple[str, str], ...] = (
    ("/jppfs/", "jppfs_cor"),
    ("/jpigp/", "jpigp_cor"),
    ("/jpcrp/", "jpcrp_cor"),
    ("xbrl.ifrs.org", "ifrs-full"),
    ("fasb.org/us-gaap", "us-gaap"),
)

# CSV 期間・時点 column
_CSV_PERIOD_KINDS = {
    "時点": "instant",
    "instant": "instant",
    "期間": "duration",
    "duration": "duration",
}

_DASHES = {"-", "−", "—", "–", "―", "ー", "‐"}
_NEGATIVE_MARKS = ("△", "▲")
_SPACE_RE = re.compile(r"\s+")


class _Fact(NamedTuple):
    context_id: str
    kind: str | None          # None when the period cannot be determined
    dimensional: bool
    value: float | None


class _Context(NamedTuple):
    id: str
    kind: str | None
    dimensional: bool


# ═══════════════════════════════════════════════════════════════════════════
#  Safe numeric helpers
# ═══════════════════════════════════════════════════════════════════════════

def parse_number(v: Any, sign: str | None = None, nil: bool = False) -> float | None:
    """Convert an XBRL/CSV value to float, returning None for missing values.

    Handles full-width digits, thousands separators, △/▲ and parenthesised
    negatives, and the XBRL `sign="-"` attribute.
    """
    if nil or v is None:
        return None
    if hasattr(v, "item"):
        v = v.item()
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        f = float(v)
    else:
        s = unicodedata.normalize("NFKC", str(v)).strip()
        if not s or s in _DASHES:
            return None
        negative = False
        if s.startswith(_NEGATIVE_MARKS):
            negative, s = True, s[1:]
        if s.startswith("(") and s.endswith(")"):
            negative, s = True, s[1:-1]
        s = _SPACE_RE.sub("", s.replace(",", ""))
        try:
            f = float(s)
        except ValueError:
            return None
        if negative:
            f = -abs(f)
    if math.isnan(f) or math.isinf(f):
        return None
    if sign == "-":
        f = -f
    return f


def fmt_amount(v: float | None) -> str:
    """Format a yen amount for display (e.g., ¥1.23T, ¥456.00M)."""
    if v is None:
        return "N/A"
    sign = "-" if v < 0 else ""
    av = abs(v)
    if av >= 1e12:
        return f"{sign}¥{av / 1e12:,.2f}T"
    if av >= 1e9:
        return f"{sign}¥{av / 1e9:,.2f}B"
    if av >= 1e6:
        return f"{sign}¥{av / 1e6:,.2f}M"
    return f"{sign}¥{av:,.0f}"


def _has_marker(context_id: str) -> bool:
    return context_id.startswith(CURRENT_PERIOD_MARKERS)


def _kind_from_id(context_id: str) -> str | None:
    if "Instant" in context_id:
        return "instant"
    if "Duration" in context_id or "YTD" in context_id:
        return "duration"
    return None


def _label_key(text: str) -> str:
    return _SPACE_RE.sub("", unicodedata.normalize("NFKC", text)).casefold()


# ═══════════════════════════════════════════════════════════════════════════
#  Context resolution
# ═══════════════════════════════════════════════════════════════════════════

def resolve_contexts(contexts: Iterable[_Context]) -> dict[str, TemporalContext]:
    """Pick the reporting-period context for each kind.

    Preference: non-dimensional with a current-period marker, then any
    non-dimensional, then any context of the kind.  Falls back to the
    CurrentYearInstant / CurrentYearDuration ids.
    """
    contexts = list(contexts)
    resolved: dict[str, TemporalContext] = {}
    defaults = {"instant": DEFAULT_INSTANT_CONTEXT, "duration": DEFAULT_DURATION_CONTEXT}

    for kind, default in defaults.items():
        of_kind = [c for c in contexts if c.kind == kind]
        tiers = (
            [c for c in of_kind if not c.dimensional and _has_marker(c.id)],
            [c for c in of_kind if not c.dimensional],
            of_kind,
        )
        chosen = next((tier[0].id for tier in tiers if tier), default)
        resolved[kind] = TemporalContext(id=chosen, kind=kind)
    return resolved


# ═══════════════════════════════════════════════════════════════════════════
#  Document indexing
# ═══════════════════════════════════════════════════════════════════════════

def _canonical_prefix(namespace: str | None, prefix: str | None) -> str | None:
    if namespace:
        for fragment, canonical in _NAMESPACE_PREFIXES:
            if fragment in namespace:
                return canonical
    return prefix


def _xbrl_contexts(root: Any) -> dict[str, _Context]:
    out: dict[str, _Context] = {}
    for ctx in root.iter(f"{{{XBRLI_NS}}}context"):
        ctx_id = ctx.get("id")
        if not ctx_id:
            continue
        period = ctx.find(f"{{{XBRLI_NS}}}period")
        kind = None
        if period is not None:
            if period.find(f"{{{XBRLI_NS}}}instant") is not None:
                kind = "instant"
            elif (period.find(f"{{{XBRLI_NS}}}startDate") is not None
                  and period.find(f"{{{XBRLI_NS}}}endDate") is not None):
                kind = "duration"
        dimensional = (
            ctx.find(f".//{{{XBRLI_NS}}}segment") is not None
            or ctx.find(f"{{{XBRLI_NS}}}scenario") is not None
        )
        out[ctx_id] = _Context(ctx_id, kind, dimensional)
    return out


def _index_xbrl(root: Any) -> tuple[dict[str, list[_Fact]], list[_Context]]:
    contexts = _xbrl_contexts(root)
    index: dict[str, list[_Fact]] = {}

    for el in root.iterchildren():
        if not isinstance(el.tag, str):
            continue  # comments / processing instructions
        context_ref = el.get("contextRef")
        if not context_ref:
            continue
        qname = etree.QName(el)
        prefix = _canonical_prefix(qname.namespace, el.prefix)
        key = f"{prefix}:{qname.localname}" if prefix else qname.localname

        ctx = contexts.get(context_ref) or _Context(
            context_ref, _kind_from_id(context_ref), "_" in context_ref,
        )
        value = parse_number(
            el.text,
            sign=el.get("sign"),
            nil=el.get(XSI_NIL) in ("true", "1"),
        )
        index.setdefault(key, []).append(_Fact(ctx.id, ctx.kind, ctx.dimensional, value))

    return index, list(contexts.values())


def _csv_kind(period_kind: str, context_id: str) -> str | None:
    kind = _CSV_PERIOD_KINDS.get(period_kind.strip().lower())
    return kind or _kind_from_id(context_id)


def _index_csv(
    table: pd.DataFrame,
) -> tuple[dict[str, list[_Fact]], dict[str, list[_Fact]], list[_Context]]:
    by_element: dict[str, list[_Fact]] = {}
    by_label: dict[str, list[_Fact]] = {}
    contexts: dict[str, _Context] = {}

    for row in table.itertuples(index=False):
        context_id = str(getattr(row, "context_id", "") or "").strip()
        kind = _csv_kind(str(getattr(row, "period_kind", "") or ""), context_id)
        dimensional = "_" in context_id
        fact = _Fact(context_id, kind, dimensional, parse_number(getattr(row, "value", None)))

        element_id = str(getattr(row, "element_id", "") or "").strip()
        if element_id:
            by_element.setdefault(element_id, []).append(fact)
        label = str(getattr(row, "label", "") or "").strip()
        if label:
            by_label.setdefault(_label_key(label), []).append(fact)
        if context_id and context_id not in contexts:
            contexts[context_id] = _Context(context_id, kind, dimensional)

    return by_element, by_label, list(contexts.values())


# ═══════════════════════════════════════════════════════════════════════════
#  Item resolution
# ═══════════════════════════════════════════════════════════════════════════

def _rank(fact: _Fact, context_id: str) -> tuple[bool, int, bool]:
    """Exact context id, then a current-period marker, then anything else.

    Within a tier non-dimensional entries win; entries of unknown kind rank
    after every known one.
    """
    if fact.context_id == context_id:
        tier = 0
    elif _has_marker(fact.context_id):
        tier = 1
    else:
        tier = 2
    return (fact.kind is None, tier, fact.dimensional)


def _resolve_item(
    item: FinancialItem,
    keys: Iterable[str],
    index: dict[str, list[_Fact]],
    context_id: str,
    allow_unknown_kind: bool = False,
) -> tuple[float | None, str | None, str | None]:
    """Best entry across all spellings for the item's context kind.

    Tiers are compared across spellings before spelling order, so a later
    spelling with an exact context match beats an earlier spelling that
    only has a marker or prior-period entry.  Entries of the other kind
    never qualify; unknown-kind entries only when allow_unknown_kind.
    """
    kind = item.context_kind
    best: tuple | None = None
    for order, key in enumerate(keys):
        for fact in index.get(key, []):
            if fact.value is None:
                continue
            if fact.kind != kind and not (allow_unknown_kind and fact.kind is None):
                continue
            rank = (*_rank(fact, context_id), order)
            if best is None or rank < best[0]:
                best = (rank, key, fact)
    if best is None:
        return None, None, None
    _, key, fact = best
    return fact.value, key, fact.context_id


class FactExtractor:
    """StructuredDocument → FinancialFactSet.  Stateless; safe to share."""

    def extract(
        self,
        doc: StructuredDocument,
        metadata: FactSetMetadata | None = None,
    ) -> FinancialFactSet:
        if doc.source == "xbrl" and doc.root is not None:
            index, contexts = _index_xbrl(doc.root)
            label_index: dict[str, list[_Fact]] = {}
            csv = False
        elif doc.source == "csv" and doc.table is not None:
            index, label_index, contexts = _index_csv(doc.table)
            csv = True
        else:
            raise ExtractionError(f"{doc.entry_name}: document has neither a tree nor a table")

        resolved = resolve_contexts(contexts)
        sections: dict[Statement, dict[str, float | None]] = {s: {} for s in Statement}
        sources: dict[str, str | None] = {}

        for item in FinancialItem:
            context_id = resolved[item.context_kind].id
            value, source, _ = _resolve_item(item, tag_spellings(item), index, context_id, csv)
            if value is None and label_index:
                value, label, _ = _resolve_item(
                    item,
                    [_label_key(lbl) for lbl in row_labels(item)],
                    label_index,
                    context_id,
                    csv,
                )
                source = f"label:{label}" if label else None
            sections[item.statement][item.value] = value
            sources[item.value] = source

        meta = (metadata or FactSetMetadata()).model_copy(
            update={"source": doc.source, "entry_name": doc.entry_name},
        )
        facts = FinancialFactSet(
            balance_sheet=sections[Statement.BALANCE_SHEET],
            profit_loss=sections[Statement.PROFIT_LOSS],
            cash_flow=sections[Statement.CASH_FLOW],
            metadata=meta,
            sources=sources,
            contexts={kind: ctx.id for kind, ctx in resolved.items()},
        )
        log.info(
            "Extracted %d/%d items from %s (%s; instant=%s, duration=%s)",
            facts.resolved_count(), len(FinancialItem), doc.entry_name, doc.source,
            facts.contexts["instant"], facts.contexts["duration"],
        )
        return facts
