"""Tests for compliance rate, aging and agreement expiry calculations."""
from datetime import datetime, timedelta

import pytest

from conftest import NOW
from vendor_compliance.models import AgreementKind
from vendor_compliance.services.compliance_calculator import (
    add_months, agreement_status, classify_aging, compliance_rate, days_since_last_upload,
    parse_agreement_period, repair_month_name
)


@pytest.mark.parametrize("approved, total, expected", [
    (0, 0, 0),
    (3, 0, 0),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),
    (3, 3, 100),
    (5, 4, 100),
])
def test_compliance_rate(approved, total, expected):
    assert compliance_rate(approved, total) == expected


def test_days_since_last_upload_uses_most_recent_and_floors():
    uploads = [NOW - timedelta(days=40), NOW - timedelta(days=3, hours=23), None, "not a date"]
    assert days_since_last_upload(uploads, NOW) == 3


def test_days_since_last_upload_without_uploads():
    assert days_since_last_upload([], NOW) == "N/A"
    assert days_since_last_upload([None], NOW) == "N/A"


@pytest.mark.parametrize("days, expected", [
    ("N/A", ("Non-Compliant", "error")),
    (45, ("Non-Compliant", "error")),
    (31, ("Non-Compliant", "error")),
    (30, ("Compliant", "warning")),
    (15, ("Compliant", "warning")),
    (14, ("Compliant", "success")),
    (0, ("Compliant", "success")),
])
def test_classify_aging(days, expected):
    assert classify_aging(days) == expected


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2024, 8, 31), 6) == datetime(2025, 2, 28)
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2024, 11, 15), 3) == datetime(2025, 2, 15)


def test_duration_counts_from_account_creation():
    term = parse_agreement_period("2 Year Contract", datetime(2024, 1, 15))
    assert term.kind == AgreementKind.DURATION
    assert term.duration_months == 24
    assert term.end_date == datetime(2024 + 2, 1, 15)

    six_months = parse_agreement_period("6 Month Contract", datetime(2024, 8, 31))
    assert six_months.end_date == datetime(2025, 2, 28)


def test_missing_agreement_period_defaults_to_annual():
    term = parse_agreement_period(None, datetime(2024, 6, 1))
    assert term.kind == AgreementKind.DURATION
    assert term.end_date == datetime(2025, 6, 1)


def test_unrecognized_text_is_treated_as_one_year():
    term = parse_agreement_period("Standard terms", "2024-03-10T00:00:00Z")
    assert term.end_date == datetime(2025, 3, 10)


def test_permanent_contract_has_no_end_date():
    term = parse_agreement_period("Permanent", datetime(2020, 1, 1))
    assert term.kind == AgreementKind.PERMANENT
    assert term.end_date is None


def test_date_range_uses_its_own_end_date():
    term = parse_agreement_period("1 April 2025 to 26 August 2025", datetime(2019, 1, 1))
    assert term.kind == AgreementKind.DATE_RANGE
    assert term.end_date == datetime(2025, 8, 26)


def test_misspelled_range_end_is_invalid():
    term = parse_agreement_period("1 April 2025 to 26 Augst 2025", datetime(2024, 1, 1))
    assert term.kind == AgreementKind.INVALID
    assert term.reason == "Invalid end date in range"


def test_unreadable_creation_date_is_invalid():
    term = parse_agreement_period("Annual Contract", "not-a-date")
    assert term.kind == AgreementKind.INVALID
    assert term.reason == "Invalid Date"


def test_agreement_expiring_within_warning_window():
    status = agreement_status("1 April 2025 to 1 July 2025", None, NOW)
    assert status.days_remaining == 16
    assert status.status == "Expiring in 16 days"
    assert status.is_expiring and not status.is_expired


def test_agreement_expired():
    status = agreement_status("1 January 2025 to 5 June 2025", None, NOW)
    assert status.days_remaining == -10
    assert status.status == "Expired 10 days ago"
    assert status.is_expired and not status.is_expiring


def test_agreement_ending_now_counts_as_expired():
    status = agreement_status("1 January 2025 to 15 June 2025", None, datetime(2025, 6, 15))
    assert status.days_remaining == 0
    assert status.status == "Expired 0 days ago"
    assert status.is_expired


def test_agreement_active():
    status = agreement_status("1 April 2025 to 31 March 2026", None, NOW)
    assert status.status == "Active"
    assert not status.is_expiring and not status.is_expired


def test_agreement_without_end_date_reports_reason():
    permanent = agreement_status("Indefinite", datetime(2020, 1, 1), NOW, vendor_id="v1", vendor_name="Acme")
    assert permanent.status == "Permanent contract"
    assert permanent.days_remaining is None
    assert permanent.vendor_name == "Acme"

    invalid = agreement_status("1 April 2025 to 26 Augst 2025", None, NOW)
    assert invalid.status == "Invalid end date in range"
    assert invalid.kind == AgreementKind.INVALID


def test_agreement_status_reports_default_period_text():
    status = agreement_status("", datetime(2024, 9, 1), NOW)
    assert status.agreement_period == "Annual Contract"
    assert status.end_date == datetime(2025, 9, 1)
    assert status.status == "Active"


def test_annual_contract_adds_twelve_months():
    term = parse_agreement_period("Annual Contract", "2024-01-01")
    assert term.end_date == datetime(2025, 1, 1)


@pytest.mark.parametrize("text", [
    "Contract 1 April 2025 to 26 August 2025",
    "1 April 2025 to 26 August 2025 (renewable)",
])
def test_date_range_inside_longer_text(text):
    term = parse_agreement_period(text, datetime(2019, 1, 1))
    assert term.kind == AgreementKind.DATE_RANGE
    assert term.end_date == datetime(2025, 8, 26)


@pytest.mark.parametrize("text, end_date", [
    ("1 April 2025 to 26 Agust 2025", datetime(2025, 8, 26)),
    ("1 April 2025 to 3 Septemb 2025", datetime(2025, 9, 3)),
    ("1 April 2024 to 28 Febuary 2025", None),
    ("1 April 2024 to 28 Februry 2025", datetime(2025, 2, 28)),
])
def test_common_month_misspellings_are_repaired(text, end_date):
    term = parse_agreement_period(text, datetime(2024, 1, 1))
    if end_date is None:
        assert term.kind == AgreementKind.INVALID
        assert term.reason == "Invalid end date in range"
    else:
        assert term.kind == AgreementKind.DATE_RANGE
        assert term.end_date == end_date


def test_repair_month_name():
    assert repair_month_name("Agust") == "august"
    assert repair_month_name("Octobr") == "october"
    assert repair_month_name("Augst") == "Augst"
