"""Download a filing's ZIP package, trying document-type variants in order.

EDINET's `type` parameter is not honoured consistently across filing
vintages: the same request can come back as the XBRL package, a PDF, or a
JSON error body.  Each variant is validated before it is accepted:

  - JSON content type → API error body, rejected (message logged)
  - PDF content type  → human-readable rendition, rejected
  - empty body        → rejected
  - body must start with a ZIP signature (standard or empty archive)
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from edinet_facts.edinet_client import EdinetClient
from edinet_facts.errors import FetchError, TransientError
from edinet_facts.models import ArchivePayload

log = logging.getLogger(__name__)

# 1 = submission package with XBRL, 2 = alternate rendition, 5 = CSV package
DEFAULT_DOCUMENT_TYPES: tuple[int, ...] = (1, 2, 5)

ZIP_SIGNATURE = b"PK\x03\x04"
EMPTY_ZIP_SIGNATURE = b"PK\x05\x06"
ZIP_SIGNATURES = (ZIP_SIGNATURE, EMPTY_ZIP_SIGNATURE)


def has_zip_signature(content: bytes) -> bool:
    return content[:4] in ZIP_SIGNATURES


def _json_error_message(content: bytes) -> str:
    try:
        data = json.loads(content)
    except ValueError:
        return "unparseable JSON body"
    if isinstance(data, dict):
        meta = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        return str(data.get("message") or meta.get("message") or data)[:200]
    return str(data)[:200]


def rejection_reason(payload: ArchivePayload) -> str | None:
    """Why a downloaded variant is unusable, or None if it looks like a ZIP."""
    content_type = (payload.content_type or "").lower()
    if "application/json" in content_type:
        return f"JSON error body: {_json_error_message(payload.content)}"
    if "application/pdf" in content_type:
        return "PDF served instead of archive"
    if not payload.content:
        return "empty body"
    if not has_zip_signature(payload.content):
        return f"bad signature {payload.content[:4]!r}"
    return None


class ArchiveFetcher:
    """Fetch the first document-type variant that is a real ZIP archive."""

    def __init__(self, client: EdinetClient, document_types: Sequence[int] = DEFAULT_DOCUMENT_TYPES):
        if not document_types:
            raise ValueError("document_types must not be empty")
        self.client = client
        self.document_types = tuple(document_types)

    def fetch(self, filing_id: str) -> ArchivePayload:
        """Return the first valid variant.  AuthError propagates.

        Raises FetchError naming every attempted type when none passes.
        """
        attempts: list[tuple[int, str]] = []
        for doc_type in self.document_types:
            try:
                payload = self.client.download_document(filing_id, doc_type)
            except TransientError as exc:
                log.warning("Archive %s type=%d: download failed: %s", filing_id, doc_type, exc)
                attempts.append((doc_type, str(exc)))
                continue

            reason = rejection_reason(payload)
            if reason is None:
                log.info(
                    "Archive %s: accepted type=%d (%d bytes)",
                    filing_id, doc_type, payload.size,
                )
                return payload

            log.warning("Archive %s type=%d rejected: %s", filing_id, doc_type, reason)
            attempts.append((doc_type, reason))

        raise FetchError(filing_id, attempts)
