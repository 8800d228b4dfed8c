"""Roll vendor submissions up into per-vendor, per-period rows.

Every report view is derived from the `VendorPeriodRollup` rows produced
here. For each vendor period exactly one source of truth is used: the
`DocumentSubmission` records when any exist for that period, otherwise the
legacy per-document records. The two are never added together.
"""
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from vendor_compliance.models import (
    DocumentCounts, DocumentSubmission, LegacyDocument, NormalizedDocument,
    SubmissionStatus, UploadPeriod, User, VendorPeriodRollup, required_document_types
)
from vendor_compliance.services.status_normalizer import count_bucket, normalize_status

logger = logging.getLogger(__name__)

# Fiscal year runs April to March
FISCAL_MONTHS = ["Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
CALENDAR_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
UNKNOWN_MONTH = "N/A"
UNKNOWN_VENDOR = "Unknown Vendor"
UNASSIGNED = "Unassigned"

_MONTH_NAMES = {
    "january": "Jan", "february": "Feb", "march": "Mar", "april": "Apr",
    "may": "May", "june": "Jun", "july": "Jul", "august": "Aug",
    "september": "Sep", "sept": "Sep", "october": "Oct", "november": "Nov",
    "december": "Dec",
}


def resolve_month(value: Any) -> Optional[str]:
    """Normalize 'April', 'apr', 4 or '04' to 'Apr'. None when unreadable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return CALENDAR_MONTHS[value - 1] if 1 <= value <= 12 else None

    text = str(value).strip().lower()
    if text.isdigit():
        return resolve_month(int(text))
    if text in _MONTH_NAMES:
        return _MONTH_NAMES[text]
    for abbreviation in CALENDAR_MONTHS:
        if text == abbreviation.lower():
            return abbreviation
    return None


def resolve_year(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return year if 1900 <= year <= 2100 else None


def resolve_upload_period(period: Optional[UploadPeriod], fallback_year: Optional[int] = None) -> Tuple[str, int]:
    """(month, year) for a submission; unreadable parts become 'N/A' / the current year."""
    if fallback_year is None:
        fallback_year = datetime.utcnow().year
    if period is None:
        return UNKNOWN_MONTH, fallback_year

    month = resolve_month(period.month) or UNKNOWN_MONTH
    year = resolve_year(period.year) or fallback_year
    return month, year


def month_of(timestamp: datetime) -> str:
    return CALENDAR_MONTHS[timestamp.month - 1]


def fiscal_index(month: str) -> int:
    """Position in the Apr..Mar cycle, -1 for unknown months."""
    try:
        return FISCAL_MONTHS.index(month)
    except ValueError:
        return -1


def _status_of(document: Any) -> Optional[str]:
    if isinstance(document, dict):
        return document.get("status")
    return getattr(document, "status", None)


def tally_documents(documents: Optional[Iterable[Any]]) -> DocumentCounts:
    """Count documents into approved/rejected/pending. Accepts None or []."""
    counts = DocumentCounts()
    for document in documents or []:
        counts.total += 1
        bucket = count_bucket(_status_of(document))
        if bucket == "approved":
            counts.approved += 1
        elif bucket == "rejected":
            counts.rejected += 1
        elif bucket == "pending":
            counts.pending += 1
    return counts


def derive_submission_status(counts: DocumentCounts, stored_status: Optional[str] = None) -> str:
    """Overall status of a period. A single rejected document outweighs any approvals."""
    if counts.total == 0:
        return stored_status or SubmissionStatus.DRAFT.value
    if counts.rejected > 0:
        return SubmissionStatus.REQUIRES_RESUBMISSION.value
    if counts.approved == counts.total:
        return SubmissionStatus.FULLY_APPROVED.value
    if counts.approved > 0:
        return SubmissionStatus.PARTIALLY_APPROVED.value
    return SubmissionStatus.UNDER_REVIEW.value


def sum_counts(rollups: Iterable[VendorPeriodRollup]) -> DocumentCounts:
    total = DocumentCounts()
    for rollup in rollups:
        total.total += rollup.counts.total
        total.approved += rollup.counts.approved
        total.rejected += rollup.counts.rejected
        total.pending += rollup.counts.pending
    return total


# =====================================================
# DOCUMENT NORMALIZATION
# =====================================================

def normalize_submission_documents(submission: DocumentSubmission) -> List[NormalizedDocument]:
    normalized = []
    for document in submission.documents or []:
        status = normalize_status(document.status)
        normalized.append(NormalizedDocument(
            document_id=document.id,
            submission_id=submission.id,
            document_type=document.document_type,
            document_name=document.document_name,
            raw_status=document.status,
            status=status.key,
            status_label=status.label,
            upload_date=document.upload_date,
            review_date=document.review_date,
            consultant_remarks=document.consultant_remarks,
            source="submission"
        ))
    return normalized


def normalize_legacy_document(document: LegacyDocument) -> NormalizedDocument:
    status = normalize_status(document.status)
    return NormalizedDocument(
        document_id=document.id,
        submission_id=None,
        document_type=document.document_type,
        document_name=document.title,
        raw_status=document.status,
        status=status.key,
        status_label=status.label,
        upload_date=document.created_at,
        review_date=document.review_date,
        source="legacy"
    )


# =====================================================
# ROLLUP CONSTRUCTION
# =====================================================

def _latest(documents: List[NormalizedDocument], attribute: str) -> Optional[NormalizedDocument]:
    dated = [doc for doc in documents if getattr(doc, attribute) is not None]
    if not dated:
        return None
    return max(dated, key=lambda doc: getattr(doc, attribute))


def _build_rollup(
    vendor_id: str,
    vendor: Optional[User],
    consultant: str,
    month: str,
    year: int,
    source: str,
    documents: List[NormalizedDocument],
    stored_status: Optional[str] = None,
    submitted_date: Optional[datetime] = None,
    approved_date: Optional[datetime] = None,
    submission_id: Optional[str] = None,
    revisions: int = 1
) -> VendorPeriodRollup:
    counts = tally_documents([{"status": doc.raw_status} for doc in documents])
    status = derive_submission_status(counts, stored_status)

    status_counts: Dict[str, int] = defaultdict(int)
    type_counts: Dict[str, int] = defaultdict(int)
    for doc in documents:
        status_counts[doc.status] += 1
        type_counts[doc.document_type] += 1

    latest_upload = _latest(documents, "upload_date")
    last_upload_date = latest_upload.upload_date if latest_upload else submitted_date

    if approved_date is None and status == SubmissionStatus.FULLY_APPROVED.value:
        latest_review = _latest(documents, "review_date")
        approved_date = latest_review.review_date if latest_review else None

    missing = []
    if source == "submission" and month != UNKNOWN_MONTH:
        uploaded_types = {doc.document_type for doc in documents}
        missing = [t for t in required_document_types(month) if t not in uploaded_types]

    return VendorPeriodRollup(
        vendor_id=vendor_id,
        vendor_name=vendor.name if vendor else UNKNOWN_VENDOR,
        vendor_company=vendor.company if vendor else None,
        consultant=consultant,
        month=month,
        year=year,
        source=source,
        submission_id=submission_id,
        counts=counts,
        status_counts=dict(status_counts),
        document_type_counts=dict(type_counts),
        status=status,
        submitted_date=submitted_date,
        approved_date=approved_date,
        last_upload_date=last_upload_date,
        last_document_type=latest_upload.document_type if latest_upload else (
            documents[-1].document_type if documents else None
        ),
        missing_mandatory=missing,
        revisions=revisions,
        documents=documents
    )


def _consultant_name(
    vendor: Optional[User],
    consultant_names: Dict[str, str],
    submission: Optional[DocumentSubmission] = None
) -> str:
    if submission is not None and submission.consultant and submission.consultant.name:
        return submission.consultant.name
    if vendor is not None and vendor.assigned_consultant:
        return consultant_names.get(vendor.assigned_consultant, UNASSIGNED)
    return UNASSIGNED


def select_current_submission(revisions: List[DocumentSubmission]) -> DocumentSubmission:
    """Latest revision of a vendor period; on equal timestamps the later record wins."""
    indexed = list(enumerate(revisions))
    _, current = max(
        indexed,
        key=lambda pair: (pair[1].revision_timestamp or datetime.min, pair[0])
    )
    return current


def _submission_rollup(
    submission: DocumentSubmission,
    vendor_id: str,
    vendor: Optional[User],
    consultant_names: Dict[str, str],
    month: str,
    year: int,
    revisions: int
) -> VendorPeriodRollup:
    approval = submission.consultant_approval
    return _build_rollup(
        vendor_id=vendor_id,
        vendor=vendor,
        consultant=_consultant_name(vendor, consultant_names, submission),
        month=month,
        year=year,
        source="submission",
        documents=normalize_submission_documents(submission),
        stored_status=submission.submission_status,
        submitted_date=submission.submission_date,
        approved_date=approval.approval_date if approval else None,
        submission_id=submission.id,
        revisions=revisions
    )


def sort_rollups(rollups: List[VendorPeriodRollup]) -> List[VendorPeriodRollup]:
    """Vendor name A-Z, then newest year, then fiscal month (Mar..Apr), N/A last."""
    return sorted(
        rollups,
        key=lambda r: (r.vendor_name.lower(), r.vendor_id, -r.year, -fiscal_index(r.month))
    )


def aggregate_vendor_periods(
    vendors: Iterable[User],
    submissions: Iterable[DocumentSubmission],
    legacy_documents: Iterable[LegacyDocument] = (),
    consultants: Iterable[User] = (),
    keep_history: bool = False,
    current_year: Optional[int] = None
) -> List[VendorPeriodRollup]:
    """Build one rollup per (vendor, month, year).

    With keep_history every submission revision becomes its own row;
    otherwise the latest revision of each period represents it.
    """
    if current_year is None:
        current_year = datetime.utcnow().year

    vendor_index = {vendor.id: vendor for vendor in vendors}
    consultant_names = {consultant.id: consultant.name for consultant in consultants}

    submission_groups: Dict[Tuple[str, str, int], List[DocumentSubmission]] = defaultdict(list)
    for submission in submissions:
        vendor_id = submission.vendor or "unknown"
        month, year = resolve_upload_period(submission.upload_period, current_year)
        if month == UNKNOWN_MONTH:
            logger.warning(f"Submission {submission.id} has no readable upload period, reporting under N/A {year}")
        submission_groups[(vendor_id, month, year)].append(submission)

    legacy_groups: Dict[Tuple[str, str, int], List[LegacyDocument]] = defaultdict(list)
    superseded = 0
    for document in legacy_documents:
        vendor_id = document.vendor or "unknown"
        timestamp = document.created_at or document.updated_at
        if timestamp is not None:
            key = (vendor_id, month_of(timestamp), timestamp.year)
        else:
            key = (vendor_id, UNKNOWN_MONTH, current_year)
        if key in submission_groups:
            superseded += 1
            continue
        legacy_groups[key].append(document)

    if superseded:
        logger.debug(f"Ignored {superseded} legacy documents for periods covered by submissions")

    rollups: List[VendorPeriodRollup] = []
    for (vendor_id, month, year), group in submission_groups.items():
        vendor = vendor_index.get(vendor_id)
        if keep_history:
            for submission in group:
                rollups.append(_submission_rollup(
                    submission, vendor_id, vendor, consultant_names, month, year, revisions=1
                ))
        else:
            current = select_current_submission(group)
            rollups.append(_submission_rollup(
                current, vendor_id, vendor, consultant_names, month, year, revisions=len(group)
            ))

    for (vendor_id, month, year), group in legacy_groups.items():
        vendor = vendor_index.get(vendor_id)
        rollups.append(_build_rollup(
            vendor_id=vendor_id,
            vendor=vendor,
            consultant=_consultant_name(vendor, consultant_names),
            month=month,
            year=year,
            source="legacy",
            documents=[normalize_legacy_document(document) for document in group]
        ))

    return sort_rollups(rollups)
