"""Shared fixtures and record factories for the reporting tests."""
from datetime import datetime
from typing import List, Optional

import pytest

from vendor_compliance.models import DocumentSubmission, LegacyDocument, User

NOW = datetime(2025, 6, 15, 12, 0, 0)


def make_vendor(vendor_id: str = "v1", name: str = "Acme Services", **fields) -> User:
    data = {"_id": vendor_id, "name": name, "role": "vendor"}
    data.update(fields)
    return User(**data)


def make_consultant(consultant_id: str = "c1", name: str = "Ravi Kumar") -> User:
    return User(**{"_id": consultant_id, "name": name, "role": "consultant"})


def make_submission(
    submission_id: str = "s1",
    vendor: str = "v1",
    month="Apr",
    year=2025,
    statuses: Optional[List[str]] = None,
    document_types: Optional[List[str]] = None,
    **fields
) -> DocumentSubmission:
    """Submission with one document per status; upload dates fall on the 5th of the period."""
    statuses = statuses or []
    document_types = document_types or ["INVOICE"] * len(statuses)
    documents = [
        {
            "_id": f"{submission_id}-d{i}",
            "documentType": document_type,
            "documentName": f"{document_type.lower()}.pdf",
            "status": status,
            "uploadDate": datetime(2025, 4, 5 + i),
        }
        for i, (status, document_type) in enumerate(zip(statuses, document_types))
    ]
    data = {
        "_id": submission_id,
        "vendor": vendor,
        "uploadPeriod": {"month": month, "year": year},
        "documents": documents,
        "submissionStatus": "submitted",
    }
    data.update(fields)
    return DocumentSubmission(**data)


def make_legacy_document(
    document_id: str = "l1",
    vendor: str = "v1",
    status: str = "pending",
    created_at: Optional[datetime] = None,
    document_type: str = "INVOICE"
) -> LegacyDocument:
    return LegacyDocument(**{
        "_id": document_id,
        "vendor": vendor,
        "title": f"{document_type.lower()}.pdf",
        "documentType": document_type,
        "status": status,
        "createdAt": created_at,
    })


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def vendor():
    return make_vendor()


@pytest.fixture
def consultant():
    return make_consultant()
