"""Tests for archive download with document-type variants."""

import json
from unittest.mock import Mock

import pytest

from conftest import zip_bytes
from edinet_facts.archive_fetcher import ArchiveFetcher, rejection_reason
from edinet_facts.errors import AuthError, FetchError, TransientError
from edinet_facts.models import ArchivePayload

ZIP = zip_bytes({"XBRL/PublicDoc/a.xbrl": b"<xbrl/>"})
JSON_ERROR = json.dumps({"metadata": {"status": "404", "message": "Not Found"}}).encode()


def _payload(doc_type, content, content_type="application/octet-stream"):
    return ArchivePayload(filing_id="S100ABCD", doc_type=doc_type, content_type=content_type, content=content)


def _client(by_type):
    client = Mock()

    def download(filing_id, doc_type):
        result = by_type[doc_type]
        if isinstance(result, Exception):
            raise result
        return result

    client.download_document.side_effect = download
    return client


def _types_requested(client):
    return [c.args[1] for c in client.download_document.call_args_list]


def test_pdf_then_zip_returns_second_variant():
    client = _client({
        1: _payload(1, b"%PDF-1.7", "application/pdf"),
        2: _payload(2, ZIP),
        5: _payload(5, ZIP),
    })
    payload = ArchiveFetcher(client).fetch("S100ABCD")
    assert payload.doc_type == 2
    assert _types_requested(client) == [1, 2]


def test_all_json_raises_fetch_error_naming_every_type():
    client = _client({t: _payload(t, JSON_ERROR, "application/json; charset=utf-8") for t in (1, 2, 5)})
    with pytest.raises(FetchError) as excinfo:
        ArchiveFetcher(client).fetch("S100ABCD")
    assert excinfo.value.attempted_types == [1, 2, 5]
    assert excinfo.value.filing_id == "S100ABCD"
    assert "Not Found" in str(excinfo.value)


def test_transient_failure_moves_to_next_variant():
    client = _client({1: TransientError("HTTP 500"), 2: _payload(2, ZIP)})
    assert ArchiveFetcher(client).fetch("S100ABCD").doc_type == 2


def test_auth_error_propagates():
    client = _client({1: AuthError("bad key")})
    with pytest.raises(AuthError):
        ArchiveFetcher(client).fetch("S100ABCD")
    assert _types_requested(client) == [1]


def test_custom_type_order():
    client = _client({5: _payload(5, ZIP), 1: _payload(1, ZIP)})
    assert ArchiveFetcher(client, (5, 1)).fetch("S100ABCD").doc_type == 5


def test_rejection_reasons():
    assert rejection_reason(_payload(1, ZIP)) is None
    assert rejection_reason(_payload(1, b"PK\x05\x06" + b"\x00" * 18)) is None
    assert "empty" in rejection_reason(_payload(1, b""))
    assert "signature" in rejection_reason(_payload(1, b"<html>"))
    assert "PDF" in rejection_reason(_payload(1, b"%PDF", "application/pdf"))
