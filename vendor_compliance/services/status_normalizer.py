"""Canonical document/submission status vocabulary.

Legacy `documents`, nested submission documents and overall submissions all
use slightly different status tokens. Everything that counts or displays a
status goes through `normalize_status` so the reports agree on one vocabulary.
"""
from typing import Optional
from pydantic import BaseModel
from enum import Enum


class CanonicalStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    PARTIALLY_APPROVED = "partially_approved"
    FULLY_APPROVED = "fully_approved"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_RESUBMISSION = "requires_resubmission"


class NormalizedStatus(BaseModel):
    raw: Optional[str] = None
    canonical: Optional[CanonicalStatus] = None
    label: str
    color: str

    @property
    def key(self) -> str:
        """Bucket key: the canonical value, or the cleaned raw token when unknown."""
        if self.canonical is not None:
            return self.canonical.value
        return _clean_token(self.raw) or "unknown"


# Tokens that collapse onto a canonical value
_ALIASES = {
    "consultant_approved": CanonicalStatus.APPROVED,
    "final_approved": CanonicalStatus.APPROVED,
    "consultant_rejected": CanonicalStatus.REJECTED,
    "final_rejected": CanonicalStatus.REJECTED,
    "uploaded": CanonicalStatus.PENDING,
    "resubmitted": CanonicalStatus.PENDING,
    "pending_consultant": CanonicalStatus.PENDING,
    "pending_vendor": CanonicalStatus.PENDING,
}

# Labels for raw tokens that read differently from their canonical value
_TOKEN_LABELS = {
    "pending_consultant": "Pending from Consultant",
    "pending_vendor": "Pending from Vendor",
    "uploaded": "Uploaded",
    "resubmitted": "Resubmitted",
    "consultant_approved": "Approved by Consultant",
    "final_approved": "Final Approved",
    "consultant_rejected": "Rejected by Consultant",
    "final_rejected": "Final Rejected",
}

_TOKEN_COLORS = {
    "pending_consultant": "warning",
    "pending_vendor": "info",
    "uploaded": "info",
    "resubmitted": "warning",
}

CANONICAL_LABELS = {
    CanonicalStatus.DRAFT: "Draft",
    CanonicalStatus.SUBMITTED: "Submitted",
    CanonicalStatus.PENDING: "Pending",
    CanonicalStatus.UNDER_REVIEW: "Under Review",
    CanonicalStatus.PARTIALLY_APPROVED: "Partially Approved",
    CanonicalStatus.FULLY_APPROVED: "Fully Approved",
    CanonicalStatus.APPROVED: "Approved",
    CanonicalStatus.REJECTED: "Rejected",
    CanonicalStatus.REQUIRES_RESUBMISSION: "Requires Resubmission",
}

CANONICAL_COLORS = {
    CanonicalStatus.DRAFT: "default",
    CanonicalStatus.SUBMITTED: "info",
    CanonicalStatus.PENDING: "warning",
    CanonicalStatus.UNDER_REVIEW: "warning",
    CanonicalStatus.PARTIALLY_APPROVED: "primary",
    CanonicalStatus.FULLY_APPROVED: "success",
    CanonicalStatus.APPROVED: "success",
    CanonicalStatus.REJECTED: "error",
    CanonicalStatus.REQUIRES_RESUBMISSION: "error",
}

_APPROVED = {CanonicalStatus.APPROVED, CanonicalStatus.FULLY_APPROVED}
_REJECTED = {CanonicalStatus.REJECTED, CanonicalStatus.REQUIRES_RESUBMISSION}
_PENDING = {CanonicalStatus.PENDING, CanonicalStatus.UNDER_REVIEW, CanonicalStatus.SUBMITTED}


def _clean_token(raw: Optional[str]) -> str:
    if raw is None:
        return ""
    return str(raw).strip().lower().replace("-", "_").replace(" ", "_")


def humanize_token(raw: Optional[str]) -> str:
    """'awaiting_cross_check' -> 'Awaiting Cross Check'."""
    token = _clean_token(raw)
    if not token:
        return "Unknown"
    return " ".join(word.capitalize() for word in token.split("_") if word)


def to_canonical(raw: Optional[str]) -> Optional[CanonicalStatus]:
    token = _clean_token(raw)
    if token in _ALIASES:
        return _ALIASES[token]
    try:
        return CanonicalStatus(token)
    except ValueError:
        return None


def normalize_status(raw: Optional[str]) -> NormalizedStatus:
    """Map a raw status token onto the canonical vocabulary.

    Unknown tokens are kept: they get a title-cased label and the default
    color so new statuses show up in reports instead of breaking them.
    """
    token = _clean_token(raw)
    canonical = to_canonical(token)

    if canonical is None:
        return NormalizedStatus(raw=raw, canonical=None, label=humanize_token(token), color="default")

    label = _TOKEN_LABELS.get(token, CANONICAL_LABELS[canonical])
    color = _TOKEN_COLORS.get(token, CANONICAL_COLORS[canonical])
    return NormalizedStatus(raw=raw, canonical=canonical, label=label, color=color)


def status_label(raw: Optional[str]) -> str:
    return normalize_status(raw).label


def status_color(raw: Optional[str]) -> str:
    return normalize_status(raw).color


def count_bucket(raw: Optional[str]) -> Optional[str]:
    """Which of the approved/rejected/pending tallies a status feeds, if any."""
    canonical = to_canonical(raw)
    if canonical in _APPROVED:
        return "approved"
    if canonical in _REJECTED:
        return "rejected"
    if canonical in _PENDING:
        return "pending"
    return None


# Per-document statuses read as the period status they correspond to
_PERIOD_EQUIVALENTS = {
    CanonicalStatus.APPROVED: CanonicalStatus.FULLY_APPROVED,
    CanonicalStatus.REJECTED: CanonicalStatus.REQUIRES_RESUBMISSION,
    CanonicalStatus.PENDING: CanonicalStatus.UNDER_REVIEW,
}


def period_status_key(raw: Optional[str]) -> str:
    """Status key for comparing period statuses; 'approved' matches 'fully_approved'."""
    canonical = to_canonical(raw)
    if canonical is None:
        return _clean_token(raw) or "unknown"
    return _PERIOD_EQUIVALENTS.get(canonical, canonical).value
