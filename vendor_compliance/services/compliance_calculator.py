"""Compliance rate, upload aging and agreement expiry calculations."""
from calendar import monthrange
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple, Union
import math
import re

from vendor_compliance.models import (
    AgreementKind, AgreementStatus, AgreementTerm, DEFAULT_AGREEMENT_PERIOD
)
from vendor_compliance.models.common import coerce_datetime
from vendor_compliance.services.submission_aggregator import CALENDAR_MONTHS, resolve_month

NOT_AVAILABLE = "N/A"
COMPLIANT = "Compliant"
NON_COMPLIANT = "Non-Compliant"

INVALID_DATE = "Invalid Date"
INVALID_RANGE_END = "Invalid end date in range"
PERMANENT_CONTRACT = "Permanent contract"

SECONDS_PER_DAY = 24 * 60 * 60

# "1 April 2025 to 26 August 2025", anywhere in the text
DATE_RANGE_PATTERN = re.compile(
    r"(\d{1,2})\s+([a-z]+)\s+(\d{4})\s+to\s+(\d{1,2})\s+([a-z]+)\s+(\d{4})",
    re.IGNORECASE
)

# (keywords, months). First match wins, so "annual" is checked before "2 year".
DURATION_KEYWORDS = [
    (("annual", "yearly", "1 year"), 12),
    (("2 year",), 24),
    (("3 year",), 36),
    (("6 month",), 6),
]
PERMANENT_KEYWORDS = ("permanent", "indefinite")

# Misspellings seen in stored agreement periods, matched as word prefixes
MONTH_TYPOS = [
    ("agust", "august"),
    ("septemb", "september"),
    ("octob", "october"),
    ("novemb", "november"),
    ("decemb", "december"),
    ("febru", "february"),
]
DEFAULT_DURATION_MONTHS = 12


# =====================================================
# COMPLIANCE RATE & AGING
# =====================================================

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compliance_rate(approved: int, total: int) -> int:
    """Approved share of documents as a whole percentage, 0 when there are none."""
    if not total or total <= 0:
        return 0
    rate = round_half_up(approved / total * 100)
    return max(0, min(100, rate))


def days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def days_since(timestamp: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.utcnow()
    return math.floor(days_between(timestamp, now))


def days_since_last_upload(timestamps: Iterable[Any], now: Optional[datetime] = None) -> Union[int, str]:
    """Whole days since the most recent upload, or 'N/A' when nothing was uploaded."""
    parsed = [coerce_datetime(ts) for ts in timestamps]
    parsed = [ts for ts in parsed if ts is not None]
    if not parsed:
        return NOT_AVAILABLE
    return days_since(max(parsed), now)


def classify_aging(
    days: Union[int, str],
    threshold_days: int = 30,
    warning_days: int = 14
) -> Tuple[str, str]:
    """(compliance status, severity) for a days-since-upload value."""
    if not isinstance(days, int):
        return NON_COMPLIANT, "error"
    if days > threshold_days:
        return NON_COMPLIANT, "error"
    if days > warning_days:
        return COMPLIANT, "warning"
    return COMPLIANT, "success"


# =====================================================
# AGREEMENT PERIOD
# =====================================================

def add_months(value: datetime, months: int) -> datetime:
    """Calendar month addition; the day is clamped to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def repair_month_name(month: str) -> str:
    lowered = month.lower()
    for typo, name in MONTH_TYPOS:
        if lowered.startswith(typo):
            return name
    return month


def _parse_day_month_year(day: str, month: str, year: str) -> Optional[datetime]:
    month_abbr = resolve_month(month) or resolve_month(repair_month_name(month))
    if month_abbr is None:
        return None
    try:
        return datetime(int(year), CALENDAR_MONTHS.index(month_abbr) + 1, int(day))
    except ValueError:
        return None


def duration_months(text: str) -> Optional[int]:
    """Contract length implied by the text; None for permanent contracts."""
    lowered = text.lower()
    for keywords, months in DURATION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return months
    if any(keyword in lowered for keyword in PERMANENT_KEYWORDS):
        return None
    return DEFAULT_DURATION_MONTHS


def parse_agreement_period(agreement_period: Optional[str], created_at: Any) -> AgreementTerm:
    """Read the free-text agreement period into a tagged term.

    A literal date range gives the end date directly, regardless of when the
    account was created. Anything else is a duration counted from creation.
    """
    text = (agreement_period or "").strip() or DEFAULT_AGREEMENT_PERIOD

    match = DATE_RANGE_PATTERN.search(text)
    if match:
        end_date = _parse_day_month_year(*match.group(4, 5, 6))
        if end_date is None:
            return AgreementTerm(kind=AgreementKind.INVALID, reason=INVALID_RANGE_END)
        return AgreementTerm(kind=AgreementKind.DATE_RANGE, end_date=end_date)

    months = duration_months(text)
    if months is None:
        return AgreementTerm(kind=AgreementKind.PERMANENT)

    start = coerce_datetime(created_at)
    if start is None:
        return AgreementTerm(kind=AgreementKind.INVALID, duration_months=months, reason=INVALID_DATE)

    return AgreementTerm(
        kind=AgreementKind.DURATION,
        end_date=add_months(start, months),
        duration_months=months
    )


def agreement_status(
    agreement_period: Optional[str],
    created_at: Any,
    now: Optional[datetime] = None,
    warning_days: int = 30,
    vendor_id: Optional[str] = None,
    vendor_name: Optional[str] = None
) -> AgreementStatus:
    now = now or datetime.utcnow()
    text = (agreement_period or "").strip() or DEFAULT_AGREEMENT_PERIOD
    term = parse_agreement_period(text, created_at)

    status = AgreementStatus(
        vendor_id=vendor_id,
        vendor_name=vendor_name,
        agreement_period=text,
        kind=term.kind,
        end_date=term.end_date,
        status=term.reason or PERMANENT_CONTRACT
    )
    if term.end_date is None:
        return status

    days_remaining = math.ceil(days_between(now, term.end_date))
    status.days_remaining = days_remaining
    if days_remaining <= 0:
        status.status = f"Expired {abs(days_remaining)} days ago"
        status.is_expired = True
    elif days_remaining <= warning_days:
        status.status = f"Expiring in {days_remaining} days"
        status.is_expiring = True
    else:
        status.status = "Active"
    return status
