from datetime import datetime
from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator
from enum import Enum

from .common import coerce_datetime, stringify_id

# =====================================================
# DOCUMENT TYPE CATALOGUE
# =====================================================

# Required for every monthly submission
MONTHLY_MANDATORY_DOCUMENTS = [
    "INVOICE",
    "FORM_T_MUSTER_ROLL",
    "BANK_STATEMENT",
    "ECR",
    "PF_COMBINED_CHALLAN",
    "PF_TRRN_DETAILS",
    "ESI_CONTRIBUTION_HISTORY",
    "ESI_CHALLAN",
    "PROFESSIONAL_TAX_RETURNS",
]

# Required only for the January submission
ANNUAL_MANDATORY_DOCUMENTS = [
    "LABOUR_WELFARE_FUND",
]
ANNUAL_DOCUMENT_MONTH = "Jan"

# Uploaded once, never mandatory
ONE_TIME_OPTIONAL_DOCUMENTS = [
    "VENDOR_AGREEMENT",
    "EPF_CODE_LETTER",
    "EPF_FORM_5A",
    "ESIC_REGISTRATION",
    "PT_REGISTRATION",
    "PT_ENROLLMENT",
    "CONTRACT_LABOUR_LICENSE",
]


def required_document_types(month: Optional[str]) -> List[str]:
    """Mandatory document types for a submission in the given month."""
    required = list(MONTHLY_MANDATORY_DOCUMENTS)
    if month == ANNUAL_DOCUMENT_MONTH:
        required.extend(ANNUAL_MANDATORY_DOCUMENTS)
    return required


# =====================================================
# STATUS ENUMS
# =====================================================

class LegacyDocumentStatus(str, Enum):
    """Statuses written to the legacy per-document collection."""
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    CONSULTANT_APPROVED = "consultant_approved"
    FINAL_APPROVED = "final_approved"
    REJECTED = "rejected"
    CONSULTANT_REJECTED = "consultant_rejected"
    FINAL_REJECTED = "final_rejected"


class SubmissionStatus(str, Enum):
    """Overall status of a monthly submission."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    PARTIALLY_APPROVED = "partially_approved"
    FULLY_APPROVED = "fully_approved"
    REJECTED = "rejected"
    REQUIRES_RESUBMISSION = "requires_resubmission"


# =====================================================
# LEGACY DOCUMENT MODEL
# =====================================================

class LegacyDocument(BaseModel):
    """One row per uploaded document in the legacy `documents` collection."""
    id: str = Field(..., alias="_id")
    vendor: Optional[str] = None
    title: Optional[str] = None
    document_type: str = Field("other", alias="documentType")
    status: str = LegacyDocumentStatus.PENDING.value
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    review_date: Optional[datetime] = Field(None, alias="reviewDate")

    class Config:
        populate_by_name = True

    @field_validator("id", "vendor", mode="before")
    @classmethod
    def validate_reference(cls, v):
        return stringify_id(v)

    @field_validator("document_type", mode="before")
    @classmethod
    def validate_document_type(cls, v):
        return v or "other"

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return str(v) if v else LegacyDocumentStatus.PENDING.value

    @field_validator("created_at", "updated_at", "review_date", mode="before")
    @classmethod
    def validate_dates(cls, v):
        return coerce_datetime(v)


# =====================================================
# DOCUMENT SUBMISSION MODELS
# =====================================================

class UploadPeriod(BaseModel):
    """Month/year a submission covers. Loosely typed; resolved by the aggregator."""
    month: Optional[Any] = None
    year: Optional[Any] = None


class ConsultantSnapshot(BaseModel):
    """Consultant details copied onto the submission when it was created."""
    name: Optional[str] = None
    email: Optional[str] = None


class ConsultantApproval(BaseModel):
    is_approved: bool = Field(False, alias="isApproved")
    approval_date: Optional[datetime] = Field(None, alias="approvalDate")
    remarks: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("is_approved", mode="before")
    @classmethod
    def validate_is_approved(cls, v):
        return bool(v)

    @field_validator("approval_date", mode="before")
    @classmethod
    def validate_approval_date(cls, v):
        return coerce_datetime(v)


class SubmissionDocument(BaseModel):
    """A single file inside a monthly submission."""
    id: Optional[str] = Field(None, alias="_id")
    document_type: str = Field("ADDITIONAL_DOCUMENT", alias="documentType")
    document_name: Optional[str] = Field(None, alias="documentName")
    status: str = "uploaded"
    upload_date: Optional[datetime] = Field(None, alias="uploadDate")
    review_date: Optional[datetime] = Field(None, alias="reviewDate")
    file_path: Optional[str] = Field(None, alias="filePath")
    file_size: Optional[int] = Field(None, alias="fileSize")
    consultant_remarks: Optional[str] = Field(None, alias="consultantRemarks")

    class Config:
        populate_by_name = True

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v):
        return stringify_id(v)

    @field_validator("document_type", mode="before")
    @classmethod
    def validate_document_type(cls, v):
        return v or "ADDITIONAL_DOCUMENT"

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return str(v) if v else "uploaded"

    @field_validator("upload_date", "review_date", mode="before")
    @classmethod
    def validate_dates(cls, v):
        return coerce_datetime(v)

    @field_validator("file_size", mode="before")
    @classmethod
    def validate_file_size(cls, v):
        try:
            return int(v) if v is not None else None
        except (TypeError, ValueError):
            return None


class DocumentSubmission(BaseModel):
    """One vendor's set of documents for a single month/year."""
    id: str = Field(..., alias="_id")
    submission_id: Optional[str] = Field(None, alias="submissionId")
    vendor: Optional[str] = None
    upload_period: Optional[UploadPeriod] = Field(None, alias="uploadPeriod")
    consultant: Optional[ConsultantSnapshot] = None
    submission_date: Optional[datetime] = Field(None, alias="submissionDate")
    last_modified_date: Optional[datetime] = Field(None, alias="lastModifiedDate")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    documents: List[SubmissionDocument] = Field(default_factory=list)
    submission_status: str = Field(SubmissionStatus.DRAFT.value, alias="submissionStatus")
    consultant_approval: Optional[ConsultantApproval] = Field(None, alias="consultantApproval")

    class Config:
        populate_by_name = True

    @field_validator("id", "vendor", mode="before")
    @classmethod
    def validate_reference(cls, v):
        return stringify_id(v)

    @field_validator("upload_period", "consultant", "consultant_approval", mode="before")
    @classmethod
    def validate_embedded(cls, v):
        if isinstance(v, BaseModel):
            return v
        return v if isinstance(v, dict) else None

    @field_validator("documents", mode="before")
    @classmethod
    def validate_documents(cls, v):
        if not isinstance(v, list):
            return []
        return [doc for doc in v if isinstance(doc, (dict, SubmissionDocument))]

    @field_validator("submission_status", mode="before")
    @classmethod
    def validate_submission_status(cls, v):
        return str(v) if v else SubmissionStatus.DRAFT.value

    @field_validator("submission_date", "last_modified_date", "created_at", mode="before")
    @classmethod
    def validate_dates(cls, v):
        return coerce_datetime(v)

    @property
    def revision_timestamp(self) -> Optional[datetime]:
        """Timestamp used to order revisions of the same vendor period."""
        return self.submission_date or self.last_modified_date or self.created_at


class SubmissionFilter(BaseModel):
    """Filter for listing submissions across vendors."""
    year: Optional[int] = None
    month: Optional[str] = None
    status: Optional[str] = None
    vendor: Optional[str] = None
