"""Open an EDINET ZIP package and locate its structured financial data.

Primary source is the XBRL instance under XBRL/PublicDoc/.  Packages that
only carry the CSV rendition (XBRL_TO_CSV/, document type 5) are read as a
degraded fallback with pandas.  Truncated or padded archives are repaired by
cutting the buffer at the last end-of-central-directory record.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Any, Literal

import pandas as pd
from lxml import etree

from edinet_facts.errors import CorruptArchiveError, ExtractionError, NoStructuredDataError
from edinet_facts.models import ArchivePayload

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Entry patterns (most specific first)
# ═══════════════════════════════════════════════════════════════════════════

PRIMARY_ENTRY_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(^|/)XBRL/PublicDoc/jpcrp[^/]*\.xbrl$", re.IGNORECASE),
    re.compile(r"(^|/)XBRL/PublicDoc/[^/]*\.xbrl$", re.IGNORECASE),
    re.compile(r"(^|/)PublicDoc/[^/]*\.xbrl$", re.IGNORECASE),
    re.compile(r"^(?!.*(AuditDoc/|jpaud)).*\.xbrl$", re.IGNORECASE),
    re.compile(r"\.xbrl$", re.IGNORECASE),
)

FALLBACK_ENTRY_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(^|/)XBRL_TO_CSV/jpcrp[^/]*\.csv$", re.IGNORECASE),
    re.compile(r"(^|/)XBRL_TO_CSV/[^/]*\.csv$", re.IGNORECASE),
    re.compile(r"\.csv$", re.IGNORECASE),
)

# Linkbase / glossary companions never carry fact values
COMPANION_RE = re.compile(r"_(lab|lab-en|gla|pre|def|cal)(\.|$)", re.IGNORECASE)

EOCD_SIGNATURE = b"PK\x05\x06"
EOCD_MIN_SIZE = 22

# CSV header → canonical column
CSV_COLUMN_ALIASES: dict[str, str] = {
    "要素ID": "element_id",
    "Element ID": "element_id",
    "ElementID": "element_id",
    "element_id": "element_id",
    "項目名": "label",
    "Item Name": "label",
    "Item name": "label",
    "Label": "label",
    "label": "label",
    "コンテキストID": "context_id",
    "Context ID": "context_id",
    "ContextID": "context_id",
    "context_id": "context_id",
    "期間・時点": "period_kind",
    "Period": "period_kind",
    "Period/Instant": "period_kind",
    "period_kind": "period_kind",
    "相対年度": "relative_year",
    "連結・個別": "consolidation",
    "ユニットID": "unit_id",
    "単位": "unit",
    "値": "value",
    "Value": "value",
    "value": "value",
}


@dataclass
class StructuredDocument:
    """Parsed primary entry: an XBRL tree, or a CSV table as fallback."""

    source: Literal["xbrl", "csv"]
    entry_name: str
    root: Any = None                       # lxml element when source == "xbrl"
    table: pd.DataFrame | None = None      # canonical columns when source == "csv"
    entry_names: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
#  Container handling
# ═══════════════════════════════════════════════════════════════════════════

def open_archive(content: bytes) -> zipfile.ZipFile:
    """Open a ZIP buffer, repairing it at the last EOCD record if needed."""
    try:
        return zipfile.ZipFile(io.BytesIO(content))
    except (zipfile.BadZipFile, ValueError, OSError) as exc:
        log.warning("Archive did not open (%s); attempting repair", exc)

    offset = content.rfind(EOCD_SIGNATURE)
    while offset != -1:
        end = offset + EOCD_MIN_SIZE
        if end <= len(content):
            comment_len = int.from_bytes(content[offset + 20:offset + 22], "little")
            end = min(len(content), end + comment_len)
            try:
                archive = zipfile.ZipFile(io.BytesIO(content[:end]))
                log.info("Archive repaired: truncated %d → %d bytes", len(content), end)
                return archive
            except (zipfile.BadZipFile, ValueError, OSError):
                pass
        offset = content.rfind(EOCD_SIGNATURE, 0, offset)

    raise CorruptArchiveError(
        f"Archive unreadable and no usable end-of-central-directory record "
        f"({len(content)} bytes)"
    )


def _find_entry(names: list[str], patterns: tuple[re.Pattern, ...]) -> str | None:
    for pattern in patterns:
        for name in names:
            normalized = name.replace("\\", "/")
            if COMPANION_RE.search(normalized.rsplit("/", 1)[-1]):
                continue
            if pattern.search(normalized):
                return name
    return None


def find_primary_entry(names: list[str]) -> str | None:
    return _find_entry(names, PRIMARY_ENTRY_PATTERNS)


def find_fallback_entry(names: list[str]) -> str | None:
    return _find_entry(names, FALLBACK_ENTRY_PATTERNS)


def _read_entry(archive: zipfile.ZipFile, name: str) -> bytes:
    try:
        return archive.read(name)
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as exc:
        raise CorruptArchiveError(f"Could not read entry {name}: {exc}") from exc


# ═══════════════════════════════════════════════════════════════════════════
#  Entry parsing
# ═══════════════════════════════════════════════════════════════════════════

def parse_xbrl(raw: bytes, entry_name: str = "<memory>") -> Any:
    """Parse XBRL instance bytes into an lxml element tree root."""
    parser = etree.XMLParser(
        recover=True,
        huge_tree=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        root = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ExtractionError(f"{entry_name}: not parseable as XML: {exc}") from exc
    if root is None:
        raise ExtractionError(f"{entry_name}: no XML document element")
    return root


def _decode_csv(raw: bytes) -> str:
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return raw.decode("utf-16")
    for encoding in ("utf-8-sig", "cp932"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ExtractionError("CSV entry is neither UTF-16, UTF-8 nor Shift_JIS")


def parse_csv(raw: bytes, entry_name: str = "<memory>") -> pd.DataFrame:
    """Read an XBRL_TO_CSV rendition into a DataFrame with canonical columns."""
    text = _decode_csv(raw)
    first_line = text.split("\n", 1)[0]
    sep = "\t" if "\t" in first_line else ","
    try:
        df = pd.read_csv(io.StringIO(text), sep=sep, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ExtractionError(f"{entry_name}: not parseable as CSV: {exc}") from exc

    df.columns = [str(c).strip().strip('"') for c in df.columns]
    df = df.rename(columns={c: CSV_COLUMN_ALIASES[c] for c in df.columns if c in CSV_COLUMN_ALIASES})
    if "value" not in df.columns:
        raise ExtractionError(f"{entry_name}: CSV has no value column ({list(df.columns)})")
    for col in ("element_id", "label", "context_id", "period_kind"):
        if col not in df.columns:
            df[col] = ""
    return df


class ArchiveParser:
    """ZIP payload → StructuredDocument."""

    def parse(self, payload: ArchivePayload | bytes) -> StructuredDocument:
        content = payload.content if isinstance(payload, ArchivePayload) else payload
        with open_archive(content) as archive:
            names = [info.filename for info in archive.infolist() if not info.is_dir()]

            primary = find_primary_entry(names)
            if primary is not None:
                log.debug("Primary XBRL entry: %s", primary)
                root = parse_xbrl(_read_entry(archive, primary), primary)
                return StructuredDocument("xbrl", primary, root=root, entry_names=names)

            fallback = find_fallback_entry(names)
            if fallback is not None:
                log.info("No XBRL instance in archive; falling back to CSV entry %s", fallback)
                table = parse_csv(_read_entry(archive, fallback), fallback)
                return StructuredDocument("csv", fallback, table=table, entry_names=names)

        raise NoStructuredDataError(names)
