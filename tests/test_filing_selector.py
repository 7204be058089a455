"""Tests for filing selection priority."""

from datetime import date

from conftest import filing
from edinet_facts.filing_selector import covers_fiscal_year, select_best


def test_annual_with_xbrl_wins():
    filings = [
        filing("Q1", form_type="quarterly", xbrl=True),
        filing("A_NOXBRL", form_type="annual", xbrl=False),
        filing("A_XBRL", form_type="annual", xbrl=True),
    ]
    assert select_best(filings, "E00001").filing_id == "A_XBRL"


def test_annual_without_xbrl_beats_quarterly_with_xbrl():
    filings = [
        filing("Q1", form_type="quarterly", xbrl=True),
        filing("A_NOXBRL", form_type="annual", xbrl=False),
    ]
    assert select_best(filings, "E00001").filing_id == "A_NOXBRL"


def test_quarterly_with_xbrl_beats_plain_quarterly():
    filings = [
        filing("Q_PLAIN", form_type="quarterly", xbrl=None),
        filing("Q_XBRL", form_type="quarterly", xbrl=True),
    ]
    assert select_best(filings, "E00001").filing_id == "Q_XBRL"


def test_other_companies_and_forms_ignored():
    filings = [
        filing("OTHER_CO", company_id="E00002", form_type="annual"),
        filing("EXTRAORDINARY", form_type="other"),
    ]
    assert select_best(filings, "E00001") is None
    assert select_best([], "E00001") is None


def test_fiscal_year_filter():
    previous = filing("FY2022", period_start=date(2022, 4, 1))
    current = filing("FY2023", form_type="quarterly", period_start=date(2023, 4, 1))
    assert select_best([previous, current], "E00001", fiscal_year=2023).filing_id == "FY2023"
    assert select_best([previous], "E00001", fiscal_year=2023) is None


def test_undeclared_period_is_accepted():
    assert covers_fiscal_year(filing("X"), 2023)
