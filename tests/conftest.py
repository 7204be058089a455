"""Shared fakes: HTTP responses, archives and XBRL instances."""

import io
import json
import zipfile
from datetime import date

import pytest

from edinet_facts.edinet_client import EdinetClient
from edinet_facts.models import FilingMetadata
from edinet_facts.rate_limiter import RateLimiter


class FakeResponse:
    """Just enough of requests.Response for EdinetClient._request."""

    def __init__(self, status_code=200, body=b"", content_type="application/json", headers=None):
        self.status_code = status_code
        self.body = body
        self.headers = {"Content-Type": content_type, **(headers or {})}

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Routes GETs to a responder(url, params) and records every call."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None, stream=False):
        self.calls.append((url, dict(params or {})))
        result = self.responder(url, dict(params or {}))
        if isinstance(result, BaseException):
            raise result
        return result


def json_response(data, status_code=200):
    return FakeResponse(status_code, json.dumps(data).encode("utf-8"), "application/json; charset=utf-8")


def zip_bytes(entries):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def filing(filing_id="S100TEST", company_id="E00001", form_type="annual", xbrl=True, **extra):
    codes = {"annual": "030000", "quarterly": "043000", "other": "120000"}
    extra.setdefault("filer_name", "Example Heavy Industries Co., Ltd.")
    return FilingMetadata(
        filing_id=filing_id,
        company_id=company_id,
        form_code=codes[form_type],
        form_type=form_type,
        xbrl_available=xbrl,
        **extra,
    )


XBRL_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<xbrli:xbrl xmlns:xbrli="http://www.xbrl.org/2003/instance"
    xmlns:xbrldi="http://xbrl.org/2006/xbrldi"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xmlns:jppfs_cor="http://disclosure.edinet-fsa.go.jp/taxonomy/jppfs/2023-12-01/jppfs_cor"
    xmlns:jpcrp_cor="http://disclosure.edinet-fsa.go.jp/taxonomy/jpcrp/2023-12-01/jpcrp_cor"
    xmlns:jpigp_cor="http://disclosure.edinet-fsa.go.jp/taxonomy/jpigp/2023-12-01/jpigp_cor">
"""

ENTITY = (
    '<xbrli:entity><xbrli:identifier scheme="http://disclosure.edinet-fsa.go.jp">'
    "E00001-000</xbrli:identifier>{segment}</xbrli:entity>"
)
SEGMENT = (
    '<xbrli:segment><xbrldi:explicitMember dimension="jppfs_cor:ConsolidatedOrNonConsolidatedAxis">'
    "jppfs_cor:NonConsolidatedMember</xbrldi:explicitMember></xbrli:segment>"
)


def instant_context(ctx_id, day, dimensional=False):
    entity = ENTITY.format(segment=SEGMENT if dimensional else "")
    return (
        f'<xbrli:context id="{ctx_id}">{entity}'
        f"<xbrli:period><xbrli:instant>{day}</xbrli:instant></xbrli:period></xbrli:context>\n"
    )


def duration_context(ctx_id, start, end, dimensional=False):
    entity = ENTITY.format(segment=SEGMENT if dimensional else "")
    return (
        f'<xbrli:context id="{ctx_id}">{entity}'
        f"<xbrli:period><xbrli:startDate>{start}</xbrli:startDate>"
        f"<xbrli:endDate>{end}</xbrli:endDate></xbrli:period></xbrli:context>\n"
    )


STANDARD_CONTEXTS = (
    instant_context("FilingDateInstant", "2024-06-28")
    + instant_context("Prior1YearInstant", "2023-03-31")
    + instant_context("CurrentYearInstant", "2024-03-31")
    + instant_context("CurrentYearInstant_NonConsolidatedMember", "2024-03-31", dimensional=True)
    + duration_context("Prior1YearDuration", "2022-04-01", "2023-03-31")
    + duration_context("CurrentYearDuration", "2023-04-01", "2024-03-31")
)


def xbrl_instance(facts, contexts=STANDARD_CONTEXTS):
    return (XBRL_HEADER + contexts + facts + "\n</xbrli:xbrl>\n").encode("utf-8")


SAMPLE_FACTS = """
<jppfs_cor:Assets contextRef="Prior1YearInstant" unitRef="JPY" decimals="-6">900000000</jppfs_cor:Assets>
<jppfs_cor:Assets contextRef="CurrentYearInstant" unitRef="JPY" decimals="-6">1000000000</jppfs_cor:Assets>
<jppfs_cor:Assets contextRef="CurrentYearInstant_NonConsolidatedMember" unitRef="JPY" decimals="-6">700000000</jppfs_cor:Assets>
<jppfs_cor:Liabilities contextRef="CurrentYearInstant" unitRef="JPY" decimals="-6">600000000</jppfs_cor:Liabilities>
<jppfs_cor:CashAndDeposits contextRef="CurrentYearInstant" unitRef="JPY" xsi:nil="true"/>
<jppfs_cor:NetSales contextRef="Prior1YearDuration" unitRef="JPY" decimals="-6">450000000</jppfs_cor:NetSales>
<jppfs_cor:NetSales contextRef="CurrentYearDuration" unitRef="JPY" decimals="-6">500000000</jppfs_cor:NetSales>
<jppfs_cor:OperatingIncome contextRef="CurrentYearDuration" unitRef="JPY" decimals="-6">-20000000</jppfs_cor:OperatingIncome>
<jppfs_cor:NetCashProvidedByUsedInOperatingActivities contextRef="CurrentYearDuration" unitRef="JPY" decimals="-6">30000000</jppfs_cor:NetCashProvidedByUsedInOperatingActivities>
"""

PRIMARY_ENTRY = "XBRL/PublicDoc/jpcrp030000-asr-001_E00001-000_2024-03-31_01_2024-06-28.xbrl"
CSV_ENTRY = "XBRL_TO_CSV/jpcrp030000-asr-001_E00001-000_2024-03-31_01_2024-06-28.csv"

CSV_HEADER = ["要素ID", "項目名", "コンテキストID", "相対年度", "連結・個別", "期間・時点", "ユニットID", "単位", "値"]


def edinet_csv(rows):
    """EDINET XBRL_TO_CSV rendition: UTF-16, tab separated, all fields quoted."""
    lines = ["\t".join(f'"{c}"' for c in CSV_HEADER)]
    lines += ["\t".join(f'"{c}"' for c in row) for row in rows]
    return ("\r\n".join(lines) + "\r\n").encode("utf-16")


CSV_ROWS = [
    ["jpcrp_cor:CompanyNameCoverPage", "提出会社名", "FilingDateInstant", "提出日時点", "その他", "時点", "", "", "Example Heavy Industries"],
    ["jpcrp030000-asr_E00001-000:TotalAssetsCustom", "Total Assets", "CurrentYearInstant", "当期末", "連結", "時点", "JPY", "円", "1000000"],
    ["jpcrp030000-asr_E00001-000:TotalAssetsCustom", "Total Assets", "Prior1YearInstant", "前期末", "連結", "時点", "JPY", "円", "900000"],
]


@pytest.fixture
def fast_limiter():
    return RateLimiter(1000.0, sleep=lambda s: None)


@pytest.fixture
def make_client(fast_limiter):
    def _make(responder, api_key="test-key", **kwargs):
        session = FakeSession(responder)
        client = EdinetClient(api_key, limiter=fast_limiter, session=session, **kwargs)
        return client, session
    return _make


@pytest.fixture
def xbrl_archive():
    return zip_bytes({
        "XBRL/AuditDoc/jpaud-aar-cn-001_E00001-000_2024-03-31_01_2024-06-28.xbrl": xbrl_instance(""),
        PRIMARY_ENTRY: xbrl_instance(SAMPLE_FACTS),
        "XBRL/PublicDoc/jpcrp030000-asr-001_E00001-000_2024-03-31_01_2024-06-28_lab.xml": b"<link/>",
    })


@pytest.fixture
def csv_archive():
    return zip_bytes({
        CSV_ENTRY: edinet_csv(CSV_ROWS),
        "XBRL_TO_CSV/jpaud-aar-cn-001_E00001-000_2024-03-31_01_2024-06-28.csv": edinet_csv([]),
    })


@pytest.fixture
def today():
    return date(2024, 7, 1)
