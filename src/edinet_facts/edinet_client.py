"""Direct EDINET API v2 client.

Uses two public endpoints (subscription key required on every call):
  - documents.json?date=YYYY-MM-DD&type=2  — submissions of one calendar date
  - documents/{docID}?type={1|2|5}         — document body (ZIP / PDF)

The archive has no company or name search, so everything upstream of this
module works by probing dates.  Every request goes through the shared
RateLimiter and is bounded in time and size.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from typing import Any

import requests

from edinet_facts.errors import AuthError, TransientError, TransientSearchError
from edinet_facts.models import ArchivePayload, FilingMetadata
from edinet_facts.rate_limiter import RateLimiter

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Constants
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_BASE_URL = "https://api.edinet-fsa.go.jp/api/v2"
DEFAULT_USER_AGENT = "edinet-facts/0.1"

# documents.json "type": 1 = metadata only, 2 = submissions + metadata
LIST_TYPE_WITH_METADATA = 2

ANNUAL_FORM_CODE = "030000"      # 有価証券報告書
QUARTERLY_FORM_CODE = "043000"   # 四半期報告書

_FORM_TYPES = {
    ANNUAL_FORM_CODE: "annual",
    QUARTERLY_FORM_CODE: "quarterly",
}

_AUTH_STATUSES = (401, 403)
_CHUNK_SIZE = 64 * 1024


def form_type_for(form_code: str | None) -> str:
    """Map an EDINET formCode to annual / quarterly / other."""
    return _FORM_TYPES.get((form_code or "").strip(), "other")


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    text = str(value).strip()[:10]
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_flag(value: Any) -> bool | None:
    if value is None or value == "":
        return None
    return str(value).strip() in ("1", "true", "True")


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _api_status(data: dict) -> int | None:
    """Status code embedded in a JSON body (top-level or metadata.status)."""
    raw = data.get("statusCode")
    if raw is None:
        meta = data.get("metadata")
        if isinstance(meta, dict):
            raw = meta.get("status")
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _api_message(data: dict) -> str:
    meta = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
    return str(data.get("message") or meta.get("message") or "no message")


# ═══════════════════════════════════════════════════════════════════════════
#  EDINET Client
# ═══════════════════════════════════════════════════════════════════════════

class EdinetClient:
    """HTTP client for the EDINET v2 API.

    Thread-safe as long as the shared RateLimiter is: the client itself
    holds no per-call state.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        limiter: RateLimiter | None = None,
        timeout: float = 30.0,
        max_payload_bytes: int = 64 * 1024 * 1024,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.limiter = limiter or RateLimiter(1.0)
        self.timeout = timeout
        self.max_payload_bytes = max_payload_bytes
        self.session = session or requests.Session()
        self.headers = {"User-Agent": user_agent}

    # ── Rate-limited HTTP request ─────────────────────────────────────

    def _request(self, path: str, params: dict) -> tuple[int, str, bytes]:
        """GET {base}/{path} with the subscription key, rate limit and bounds.

        Returns (status_code, content_type, body).  Raises AuthError on
        401/403 or a missing key and TransientError on anything else that
        goes wrong with the transport.
        """
        if not self.api_key:
            raise AuthError("EDINET_API_KEY is not set")

        url = f"{self.base_url}/{path}"
        query = {**params, "Subscription-Key": self.api_key}

        self.limiter.throttle()
        try:
            with self.session.get(
                url,
                params=query,
                headers=self.headers,
                timeout=self.timeout,
                stream=True,
            ) as resp:
                status = resp.status_code
                content_type = resp.headers.get("Content-Type", "") or ""
                if status in _AUTH_STATUSES:
                    raise AuthError(f"EDINET rejected the subscription key (HTTP {status})")
                if status >= 400:
                    raise TransientError(f"HTTP {status} from {path}")
                body = self._read_bounded(resp, path)
        except requests.exceptions.Timeout as exc:
            raise TransientError(f"Timed out after {self.timeout}s: {path}") from exc
        except requests.exceptions.RequestException as exc:
            raise TransientError(f"Request failed for {path}: {exc}") from exc

        return status, content_type, body

    def _read_bounded(self, resp: requests.Response, path: str) -> bytes:
        declared = resp.headers.get("Content-Length")
        if declared and str(declared).isdigit() and int(declared) > self.max_payload_bytes:
            raise TransientError(
                f"{path}: declared size {declared} exceeds limit {self.max_payload_bytes}"
            )

        chunks: list[bytes] = []
        total = 0
        for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
            if not chunk:
                continue
            total += len(chunk)
            if total > self.max_payload_bytes:
                raise TransientError(
                    f"{path}: body exceeds limit of {self.max_payload_bytes} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    # ── Submission index ──────────────────────────────────────────────

    def list_documents(self, day: date | str) -> list[FilingMetadata]:
        """List every submission filed on one calendar date.

        Returns an empty list for dates without submissions (weekends,
        holidays).  Raises AuthError (fatal) or TransientSearchError.
        """
        day_str = day.isoformat() if isinstance(day, date) else str(day)
        try:
            _, _, body = self._request(
                "documents.json",
                {"date": day_str, "type": LIST_TYPE_WITH_METADATA},
            )
        except TransientError as exc:
            raise TransientSearchError(str(exc), date=day_str) from exc

        try:
            data = json.loads(body) if body else {}
        except ValueError as exc:
            raise TransientSearchError(f"Invalid JSON for {day_str}: {exc}", date=day_str) from exc
        if not isinstance(data, dict):
            raise TransientSearchError(f"Unexpected document list shape for {day_str}", date=day_str)

        status = _api_status(data)
        if status in _AUTH_STATUSES:
            raise AuthError(f"EDINET rejected the subscription key: {_api_message(data)}")
        if status == 404:
            return []
        if status is not None and status >= 400:
            raise TransientSearchError(
                f"EDINET status {status} for {day_str}: {_api_message(data)}",
                date=day_str,
            )

        results = data.get("results") or []
        filings = [self._to_filing(row) for row in results if isinstance(row, dict) and row.get("docID")]
        log.debug("EDINET %s: %d submission(s)", day_str, len(filings))
        return filings

    @staticmethod
    def _to_filing(row: dict) -> FilingMetadata:
        form_code = _clean(row.get("formCode"))
        return FilingMetadata(
            filing_id=str(row["docID"]),
            company_id=_clean(row.get("edinetCode")),
            form_code=form_code,
            form_type=form_type_for(form_code),
            submit_date=_clean(row.get("submitDateTime")),
            description=_clean(row.get("docDescription")),
            xbrl_available=_parse_flag(row.get("xbrlFlag")),
            filer_name=_clean(row.get("filerName")),
            submitter_name=_clean(row.get("submitterName")),
            securities_code=_clean(row.get("secCode") or row.get("securitiesCode")),
            tax_id=_clean(row.get("JCN") or row.get("jcn")),
            period_start=_parse_date(row.get("periodStart")),
            period_end=_parse_date(row.get("periodEnd")),
        )

    # ── Document bodies ───────────────────────────────────────────────

    def download_document(self, filing_id: str, doc_type: int) -> ArchivePayload:
        """Download one rendition of a filing.  No content validation here."""
        _, content_type, body = self._request(f"documents/{filing_id}", {"type": doc_type})
        return ArchivePayload(
            filing_id=filing_id,
            doc_type=doc_type,
            content_type=content_type,
            content=body,
        )

    # ── Connectivity probe ────────────────────────────────────────────

    def check_connection(self, today: date | None = None) -> dict:
        """Probe the document list for the date one week back.

        Never raises: the outcome is reported in the returned dict.
        """
        probe = (today or date.today()) - timedelta(days=7)
        result: dict[str, Any] = {
            "ok": False,
            "date": probe.isoformat(),
            "base_url": self.base_url,
            "documents": 0,
            "status": "error",
            "message": "",
        }
        try:
            docs = self.list_documents(probe)
        except AuthError as exc:
            log.warning("EDINET connection check: auth failure: %s", exc)
            result["status"] = "auth"
            result["message"] = f"{exc}. Check EDINET_API_KEY."
            return result
        except TransientSearchError as exc:
            log.warning("EDINET connection check failed: %s", exc)
            result["message"] = str(exc)
            return result

        result.update(ok=True, status="ok", documents=len(docs), message="Connected to EDINET")
        return result


# ═══════════════════════════════════════════════════════════════════════════
#  Module-level singleton — shared across the app
# ═══════════════════════════════════════════════════════════════════════════

_client: EdinetClient | None = None


def get_edinet_client() -> EdinetClient:
    """Get or create the shared EdinetClient singleton.

    Reads the subscription key, endpoint and limits from config.
    """
    global _client
    if _client is None:
        from edinet_facts.config import get_config
        config = get_config()
        _client = EdinetClient(
            config.edinet_api_key,
            base_url=config.edinet_base_url,
            limiter=RateLimiter(config.requests_per_second),
            timeout=config.request_timeout,
            max_payload_bytes=config.max_payload_bytes,
            user_agent=config.user_agent,
        )
    return _client
