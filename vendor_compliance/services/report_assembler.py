"""Shape vendor period rollups into the payloads the admin views render.

Every builder here takes the same `VendorPeriodRollup` rows, so the tables,
charts and summaries of one report can never disagree with each other.
"""
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from vendor_compliance.models import (
    AgingSummary, AgreementStatus, DocumentTypeSummaryEntry, MonthlySubmissionEntry,
    NormalizedDocument, StatusDistributionEntry, User, VendorAgingRow,
    VendorComplianceStatus, VendorPerformanceEntry, VendorPeriodRollup,
    VendorSubmissionStatusRow, SubmissionStatus
)
from vendor_compliance.services.compliance_calculator import (
    NOT_AVAILABLE, COMPLIANT, NON_COMPLIANT, agreement_status, classify_aging,
    compliance_rate, days_since_last_upload, round_half_up
)
from vendor_compliance.services.status_normalizer import CanonicalStatus, normalize_status
from vendor_compliance.services.submission_aggregator import (
    CALENDAR_MONTHS, UNASSIGNED, UNKNOWN_MONTH, sum_counts
)

_CANONICAL_ORDER = [status.value for status in CanonicalStatus]


def _rollups_by_vendor(rollups: Iterable[VendorPeriodRollup]) -> Dict[str, List[VendorPeriodRollup]]:
    grouped: Dict[str, List[VendorPeriodRollup]] = defaultdict(list)
    for rollup in rollups:
        grouped[rollup.vendor_id].append(rollup)
    return grouped


# =====================================================
# VENDOR SUBMISSION STATUS TABLE
# =====================================================

def build_vendor_status_rows(rollups: Iterable[VendorPeriodRollup]) -> List[VendorSubmissionStatusRow]:
    rows = []
    for rollup in rollups:
        status = normalize_status(rollup.status)
        rows.append(VendorSubmissionStatusRow(
            vendor_id=rollup.vendor_id,
            vendor_name=rollup.vendor_name,
            consultant=rollup.consultant,
            month=rollup.month,
            year=rollup.year,
            status=rollup.status,
            status_label=status.label,
            status_color=status.color,
            total_documents=rollup.counts.total,
            approved_documents=rollup.counts.approved,
            rejected_documents=rollup.counts.rejected,
            pending_documents=rollup.counts.pending,
            compliance_rate=compliance_rate(rollup.counts.approved, rollup.counts.total),
            submitted_date=rollup.submitted_date,
            approved_date=rollup.approved_date,
            missing_mandatory_documents=rollup.missing_mandatory,
            source=rollup.source,
            revisions=rollup.revisions
        ))
    return rows


# =====================================================
# CHART DATA
# =====================================================

def _status_sort_key(status: str) -> Tuple[int, str]:
    if status in _CANONICAL_ORDER:
        return _CANONICAL_ORDER.index(status), status
    return len(_CANONICAL_ORDER), status


def build_status_distribution(rollups: Iterable[VendorPeriodRollup]) -> List[StatusDistributionEntry]:
    """Document counts per canonical status for a pie chart; empty buckets are left out."""
    totals: Dict[str, int] = defaultdict(int)
    for rollup in rollups:
        for status, count in rollup.status_counts.items():
            totals[status] += count

    entries = []
    for status in sorted(totals, key=_status_sort_key):
        if totals[status] <= 0:
            continue
        normalized = normalize_status(status)
        entries.append(StatusDistributionEntry(
            name=normalized.label,
            value=totals[status],
            status=status,
            color=normalized.color
        ))
    return entries


def build_monthly_submission_trend(rollups: Iterable[VendorPeriodRollup]) -> List[MonthlySubmissionEntry]:
    """Number of vendor periods per calendar month, oldest first, 'N/A' last."""
    counts: Dict[Tuple[Optional[int], str], int] = defaultdict(int)
    for rollup in rollups:
        if rollup.month == UNKNOWN_MONTH:
            counts[(None, UNKNOWN_MONTH)] += 1
        else:
            counts[(rollup.year, rollup.month)] += 1

    dated = sorted(
        (key for key in counts if key[0] is not None),
        key=lambda key: (key[0], CALENDAR_MONTHS.index(key[1]))
    )
    entries = [
        MonthlySubmissionEntry(name=f"{month} {year}", count=counts[(year, month)], month=month, year=year)
        for year, month in dated
    ]
    if (None, UNKNOWN_MONTH) in counts:
        entries.append(MonthlySubmissionEntry(
            name=UNKNOWN_MONTH, count=counts[(None, UNKNOWN_MONTH)], month=UNKNOWN_MONTH
        ))
    return entries


def build_document_type_summary(rollups: Iterable[VendorPeriodRollup]) -> List[DocumentTypeSummaryEntry]:
    totals: Dict[str, int] = defaultdict(int)
    for rollup in rollups:
        for document_type, count in rollup.document_type_counts.items():
            totals[document_type] += count
    return [
        DocumentTypeSummaryEntry(document_type=document_type, count=count)
        for document_type, count in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    ]


def build_vendor_performance(rollups: Iterable[VendorPeriodRollup]) -> List[VendorPerformanceEntry]:
    """Per-vendor approval record across periods, best compliance first."""
    entries = []
    for vendor_id, vendor_rollups in _rollups_by_vendor(rollups).items():
        counts = sum_counts(vendor_rollups)
        first = vendor_rollups[0]
        entries.append(VendorPerformanceEntry(
            vendor_id=vendor_id,
            vendor_name=first.vendor_name,
            vendor_company=first.vendor_company,
            total_periods=len(vendor_rollups),
            fully_approved_periods=sum(
                1 for r in vendor_rollups if r.status == SubmissionStatus.FULLY_APPROVED.value
            ),
            resubmission_periods=sum(
                1 for r in vendor_rollups if r.status == SubmissionStatus.REQUIRES_RESUBMISSION.value
            ),
            total_documents=counts.total,
            approved_documents=counts.approved,
            compliance_rate=compliance_rate(counts.approved, counts.total)
        ))
    return sorted(entries, key=lambda entry: (-entry.compliance_rate, entry.vendor_name.lower()))


# =====================================================
# AGING REPORT
# =====================================================

def build_vendor_aging_report(
    vendors: Iterable[User],
    rollups: Iterable[VendorPeriodRollup],
    consultants: Iterable[User] = (),
    now: Optional[datetime] = None,
    threshold_days: int = 30,
    warning_days: int = 14
) -> Tuple[List[VendorAgingRow], AgingSummary]:
    """One row per vendor with days since its last upload, plus a summary."""
    now = now or datetime.utcnow()
    consultant_names = {consultant.id: consultant.name for consultant in consultants}
    by_vendor = _rollups_by_vendor(rollups)

    rows = []
    for vendor in sorted(vendors, key=lambda v: (v.name.lower(), v.id)):
        dated = [r for r in by_vendor.get(vendor.id, []) if r.last_upload_date is not None]
        latest = max(dated, key=lambda r: r.last_upload_date) if dated else None

        days = days_since_last_upload([latest.last_upload_date] if latest else [], now)
        status, severity = classify_aging(days, threshold_days, warning_days)

        if vendor.assigned_consultant:
            consultant = consultant_names.get(vendor.assigned_consultant, UNASSIGNED)
        else:
            consultant = UNASSIGNED

        rows.append(VendorAgingRow(
            vendor_id=vendor.id,
            vendor_code=vendor.display_vendor_code,
            vendor_name=vendor.name,
            company=vendor.company or NOT_AVAILABLE,
            email=vendor.email,
            assigned_consultant=consultant,
            last_upload_date=latest.last_upload_date if latest else None,
            days_since_last_upload=days,
            status=status,
            severity=severity,
            last_document_type=(latest.last_document_type if latest else None) or NOT_AVAILABLE
        ))

    numeric_days = [row.days_since_last_upload for row in rows if isinstance(row.days_since_last_upload, int)]
    summary = AgingSummary(
        total_vendors=len(rows),
        compliant_vendors=sum(1 for row in rows if row.status == COMPLIANT),
        non_compliant_vendors=sum(1 for row in rows if row.status == NON_COMPLIANT),
        average_days_since_upload=round_half_up(sum(numeric_days) / len(numeric_days)) if numeric_days else 0,
        threshold_days=threshold_days
    )
    return rows, summary


# =====================================================
# AGREEMENTS
# =====================================================

def build_agreement_report(
    vendors: Iterable[User],
    now: Optional[datetime] = None,
    warning_days: int = 30,
    expiring_only: bool = False
) -> List[AgreementStatus]:
    """Agreement status per vendor, soonest end date first; open-ended terms last."""
    now = now or datetime.utcnow()
    statuses = [
        agreement_status(
            vendor.agreement_period, vendor.created_at, now, warning_days,
            vendor_id=vendor.id, vendor_name=vendor.name
        )
        for vendor in vendors
    ]
    if expiring_only:
        statuses = [status for status in statuses if status.is_expiring or status.is_expired]
    return sorted(
        statuses,
        key=lambda s: (s.days_remaining is None, s.days_remaining or 0, (s.vendor_name or "").lower())
    )


# =====================================================
# SINGLE VENDOR STATUS
# =====================================================

def build_vendor_compliance_status(
    vendor: User,
    rollups: List[VendorPeriodRollup],
    now: Optional[datetime] = None,
    warning_days: int = 30,
    year: Optional[int] = None,
    month: Optional[str] = None
) -> VendorComplianceStatus:
    now = now or datetime.utcnow()
    counts = sum_counts(rollups)

    documents: List[NormalizedDocument] = []
    for rollup in rollups:
        documents.extend(rollup.documents)

    documents_by_type: Dict[str, List[NormalizedDocument]] = defaultdict(list)
    for document in documents:
        documents_by_type[document.document_type].append(document)

    activity = [r.last_upload_date for r in rollups if r.last_upload_date is not None]
    activity += [r.submitted_date for r in rollups if r.submitted_date is not None]
    last_activity = max(activity) if activity else vendor.created_at

    return VendorComplianceStatus(
        vendor_id=vendor.id,
        vendor_name=vendor.name,
        vendor_company=vendor.company,
        year=year,
        month=month,
        total_documents=counts.total,
        approved_documents=counts.approved,
        rejected_documents=counts.rejected,
        pending_documents=counts.pending,
        compliance_score=compliance_rate(counts.approved, counts.total),
        days_since_last_upload=days_since_last_upload(
            [r.last_upload_date for r in rollups], now
        ),
        last_activity=last_activity,
        documents=documents,
        documents_by_type=dict(documents_by_type),
        periods=build_vendor_status_rows(rollups),
        agreement=agreement_status(
            vendor.agreement_period, vendor.created_at, now, warning_days,
            vendor_id=vendor.id, vendor_name=vendor.name
        )
    )
