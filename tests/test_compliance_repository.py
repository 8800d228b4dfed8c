"""Tests for the motor-backed repository against fake collections."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId

from vendor_compliance.config import settings
from vendor_compliance.models import SubmissionFilter
from vendor_compliance.services.compliance_repository import ComplianceRepository


class FakeCursor:
    """Async cursor over canned documents; records the sort it was given."""

    def __init__(self, docs):
        self.docs = [dict(doc) for doc in docs]
        self.sort_spec = None

    def sort(self, spec):
        self.sort_spec = spec
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield doc


def make_collection(docs=(), find_one_result=None):
    collection = MagicMock()
    collection.cursor = FakeCursor(docs)
    collection.find = MagicMock(return_value=collection.cursor)
    collection.find_one = AsyncMock(return_value=find_one_result)
    return collection


@pytest.fixture
def collections():
    return {
        settings.users_collection: make_collection(),
        settings.documents_collection: make_collection(),
        settings.submissions_collection: make_collection(),
    }


@pytest.fixture
def repository(collections):
    with patch(
        "vendor_compliance.services.compliance_repository.get_database",
        return_value=collections
    ):
        yield ComplianceRepository()


@pytest.mark.asyncio
async def test_submission_query_keys(repository, collections):
    vendor_id = str(ObjectId())

    await repository.list_all_submissions(
        SubmissionFilter(vendor=vendor_id, year=2025, month="april", status="submitted")
    )

    submissions = collections[settings.submissions_collection]
    submissions.find.assert_called_once_with({
        "vendor": ObjectId(vendor_id),
        "uploadPeriod.year": 2025,
        "uploadPeriod.month": "Apr",
        "submissionStatus": "submitted",
    })
    assert submissions.cursor.sort_spec == [("createdAt", -1)]


@pytest.mark.asyncio
async def test_vendor_submissions_without_period(repository, collections):
    await repository.list_submissions_for_vendor("v1")

    collections[settings.submissions_collection].find.assert_called_once_with({"vendor": "v1"})


@pytest.mark.asyncio
async def test_non_objectid_reference_is_queried_as_string(repository, collections):
    await repository.list_legacy_documents_for_vendor("legacy-vendor-7")

    collections[settings.documents_collection].find.assert_called_once_with({"vendor": "legacy-vendor-7"})


@pytest.mark.asyncio
async def test_get_user_by_id(repository, collections):
    user_id = ObjectId()
    users = collections[settings.users_collection]
    users.find_one.return_value = {"_id": user_id, "name": "Acme", "role": "vendor"}

    user = await repository.get_user_by_id(str(user_id))

    users.find_one.assert_awaited_once_with({"_id": user_id})
    assert user.id == str(user_id)
    assert user.is_vendor


@pytest.mark.asyncio
async def test_get_user_by_id_missing(repository):
    assert await repository.get_user_by_id("nobody") is None


@pytest.mark.asyncio
async def test_records_failing_validation_are_skipped(repository, collections):
    users = collections[settings.users_collection]
    users.cursor.docs = [
        {"_id": ObjectId(), "name": "Acme", "role": "vendor"},
        {"name": "No Id", "role": "vendor"},
    ]

    vendors = await repository.list_vendors()

    users.find.assert_called_once_with({"role": "vendor"})
    assert users.cursor.sort_spec == [("name", 1)]
    assert [vendor.name for vendor in vendors] == ["Acme"]


@pytest.mark.asyncio
async def test_query_failure_is_raised(repository, collections):
    collections[settings.documents_collection].find.side_effect = RuntimeError("cursor killed")

    with pytest.raises(RuntimeError, match="cursor killed"):
        await repository.list_all_legacy_documents()


@pytest.mark.asyncio
async def test_missing_database_connection():
    with patch("vendor_compliance.services.compliance_repository.get_database", return_value=None):
        repository = ComplianceRepository()
        with pytest.raises(Exception, match="Database connection not established"):
            await repository.list_vendors()
