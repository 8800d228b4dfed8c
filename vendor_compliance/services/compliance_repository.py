from typing import Optional, List, Any, Dict, Type
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ValidationError
import logging

from vendor_compliance.config import settings
from vendor_compliance.database import get_database
from vendor_compliance.models import (
    User, LegacyDocument, DocumentSubmission, SubmissionFilter, UserRole
)
from vendor_compliance.services.submission_aggregator import resolve_month

logger = logging.getLogger(__name__)


class ComplianceRepository:
    """Read-only access to the portal's users, documents and submissions."""

    def __init__(self):
        self.db = None
        self.users_collection = None
        self.documents_collection = None
        self.submissions_collection = None

    async def _ensure_db_connection(self):
        """Ensure database connection is established."""
        if self.db is None:
            self.db = get_database()
            if self.db is None:
                raise Exception(
                    "Database connection not established. Please ensure the application has started properly.")
            self.users_collection = self.db[settings.users_collection]
            self.documents_collection = self.db[settings.documents_collection]
            self.submissions_collection = self.db[settings.submissions_collection]

    def _reference(self, value: str) -> Any:
        """Query value for a reference field: ObjectId when the id is one, else the raw string."""
        try:
            return ObjectId(value)
        except (InvalidId, TypeError):
            return value

    def _convert_objectid_to_string(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Convert ObjectId to string in document."""
        if doc and "_id" in doc:
            doc["id"] = str(doc["_id"])
            del doc["_id"]
        return doc

    def _to_model(self, model: Type[BaseModel], doc: Dict[str, Any]) -> Optional[BaseModel]:
        doc = self._convert_objectid_to_string(doc)
        try:
            return model(**doc)
        except ValidationError as e:
            logger.warning(f"Skipping {model.__name__} {doc.get('id')}: {e.error_count()} validation error(s)")
            return None

    async def _find(self, collection, query: Dict[str, Any], model: Type[BaseModel], sort=None) -> List[Any]:
        cursor = collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        records = []
        async for doc in cursor:
            record = self._to_model(model, doc)
            if record is not None:
                records.append(record)
        return records

    # =====================================================
    # USERS
    # =====================================================

    async def list_users_by_role(self, role: str) -> List[User]:
        """Get all users with the given role."""
        await self._ensure_db_connection()
        try:
            return await self._find(self.users_collection, {"role": role}, User, sort=[("name", 1)])
        except Exception as e:
            logger.error(f"Error listing users with role {role}: {e}")
            raise

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        await self._ensure_db_connection()
        try:
            user_doc = await self.users_collection.find_one({"_id": self._reference(user_id)})
            if user_doc:
                return self._to_model(User, user_doc)
            return None
        except Exception as e:
            logger.error(f"Error getting user by ID: {e}")
            raise

    async def list_vendors(self) -> List[User]:
        return await self.list_users_by_role(UserRole.VENDOR.value)

    async def list_consultants(self) -> List[User]:
        return await self.list_users_by_role(UserRole.CONSULTANT.value)

    # =====================================================
    # DOCUMENT SUBMISSIONS
    # =====================================================

    async def list_submissions_for_vendor(
        self,
        vendor_id: str,
        year: Optional[int] = None,
        month: Optional[str] = None
    ) -> List[DocumentSubmission]:
        """Get a vendor's submissions, optionally for one upload period."""
        return await self.list_all_submissions(SubmissionFilter(vendor=vendor_id, year=year, month=month))

    async def list_all_submissions(self, submission_filter: Optional[SubmissionFilter] = None) -> List[DocumentSubmission]:
        """Get submissions across vendors filtered by period and overall status."""
        await self._ensure_db_connection()
        submission_filter = submission_filter or SubmissionFilter()

        query: Dict[str, Any] = {}
        if submission_filter.vendor:
            query["vendor"] = self._reference(submission_filter.vendor)
        if submission_filter.year is not None:
            query["uploadPeriod.year"] = submission_filter.year
        if submission_filter.month:
            query["uploadPeriod.month"] = resolve_month(submission_filter.month) or submission_filter.month
        if submission_filter.status:
            query["submissionStatus"] = submission_filter.status

        try:
            return await self._find(
                self.submissions_collection, query, DocumentSubmission, sort=[("createdAt", -1)]
            )
        except Exception as e:
            logger.error(f"Error listing submissions with query {query}: {e}")
            raise

    # =====================================================
    # LEGACY DOCUMENTS
    # =====================================================

    async def list_legacy_documents_for_vendor(self, vendor_id: str) -> List[LegacyDocument]:
        """Get a vendor's documents from the legacy per-document collection."""
        await self._ensure_db_connection()
        try:
            return await self._find(
                self.documents_collection,
                {"vendor": self._reference(vendor_id)},
                LegacyDocument,
                sort=[("createdAt", -1)]
            )
        except Exception as e:
            logger.error(f"Error listing legacy documents for vendor {vendor_id}: {e}")
            raise

    async def list_all_legacy_documents(self) -> List[LegacyDocument]:
        await self._ensure_db_connection()
        try:
            return await self._find(self.documents_collection, {}, LegacyDocument, sort=[("createdAt", -1)])
        except Exception as e:
            logger.error(f"Error listing legacy documents: {e}")
            raise


# Create a singleton instance
compliance_repository = ComplianceRepository()
