"""Tests for status normalization."""
import pytest

from vendor_compliance.services.status_normalizer import (
    CanonicalStatus, count_bucket, humanize_token, normalize_status, period_status_key, status_color,
    status_label, to_canonical
)


@pytest.mark.parametrize("raw, expected", [
    ("approved", CanonicalStatus.APPROVED),
    ("final_approved", CanonicalStatus.APPROVED),
    ("Consultant Approved", CanonicalStatus.APPROVED),
    ("consultant_rejected", CanonicalStatus.REJECTED),
    ("uploaded", CanonicalStatus.PENDING),
    ("resubmitted", CanonicalStatus.PENDING),
    ("under-review", CanonicalStatus.UNDER_REVIEW),
    ("requires_resubmission", CanonicalStatus.REQUIRES_RESUBMISSION),
    ("awaiting_cross_check", None),
    (None, None),
])
def test_to_canonical(raw, expected):
    assert to_canonical(raw) == expected


def test_token_specific_label_wins_over_canonical_label():
    status = normalize_status("pending_consultant")
    assert status.canonical == CanonicalStatus.PENDING
    assert status.label == "Pending from Consultant"
    assert status.color == "warning"
    assert status.key == "pending"


def test_canonical_status_labels_and_colors():
    assert status_label("under_review") == "Under Review"
    assert status_label("fully_approved") == "Fully Approved"
    assert status_color("rejected") == "error"
    assert status_color("approved") == "success"


def test_unknown_status_is_kept_with_readable_label():
    status = normalize_status("awaiting_cross_check")
    assert status.canonical is None
    assert status.label == "Awaiting Cross Check"
    assert status.color == "default"
    assert status.key == "awaiting_cross_check"


def test_missing_status_reads_unknown():
    status = normalize_status(None)
    assert status.label == "Unknown"
    assert status.key == "unknown"
    assert humanize_token("  ") == "Unknown"


@pytest.mark.parametrize("raw, bucket", [
    ("approved", "approved"),
    ("final_approved", "approved"),
    ("fully_approved", "approved"),
    ("rejected", "rejected"),
    ("final_rejected", "rejected"),
    ("pending", "pending"),
    ("uploaded", "pending"),
    ("under_review", "pending"),
    ("submitted", "pending"),
    ("draft", None),
    ("partially_approved", None),
    ("mystery", None),
])
def test_count_bucket(raw, bucket):
    assert count_bucket(raw) == bucket


@pytest.mark.parametrize("raw, key", [
    ("approved", "fully_approved"),
    ("consultant_approved", "fully_approved"),
    ("fully_approved", "fully_approved"),
    ("rejected", "requires_resubmission"),
    ("pending", "under_review"),
    ("partially_approved", "partially_approved"),
    ("draft", "draft"),
    ("Awaiting Cross Check", "awaiting_cross_check"),
])
def test_period_status_key(raw, key):
    assert period_status_key(raw) == key
