from datetime import datetime
from typing import Optional, List, Dict, Union
from pydantic import BaseModel, Field
from enum import Enum

from .document_models import SubmissionFilter

# =====================================================
# AGGREGATION MODELS
# =====================================================

class DocumentCounts(BaseModel):
    """Document tallies for one vendor period (or any set of documents)."""
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class NormalizedDocument(BaseModel):
    """A submission or legacy document with its status canonicalized."""
    document_id: Optional[str] = None
    submission_id: Optional[str] = None
    document_type: str
    document_name: Optional[str] = None
    raw_status: str
    status: str
    status_label: str
    upload_date: Optional[datetime] = None
    review_date: Optional[datetime] = None
    consultant_remarks: Optional[str] = None
    source: str


class VendorPeriodRollup(BaseModel):
    """Per-vendor-per-period aggregate every report view is built from."""
    vendor_id: str
    vendor_name: str
    vendor_company: Optional[str] = None
    consultant: str = "Unassigned"
    month: str
    year: int
    source: str
    submission_id: Optional[str] = None
    counts: DocumentCounts = Field(default_factory=DocumentCounts)
    status_counts: Dict[str, int] = Field(default_factory=dict)
    document_type_counts: Dict[str, int] = Field(default_factory=dict)
    status: str
    submitted_date: Optional[datetime] = None
    approved_date: Optional[datetime] = None
    last_upload_date: Optional[datetime] = None
    last_document_type: Optional[str] = None
    missing_mandatory: List[str] = Field(default_factory=list)
    revisions: int = 1
    documents: List[NormalizedDocument] = Field(default_factory=list)


# =====================================================
# REPORT ROW MODELS
# =====================================================

class VendorSubmissionStatusRow(BaseModel):
    vendor_id: str
    vendor_name: str
    consultant: str
    month: str
    year: int
    status: str
    status_label: str
    status_color: str
    total_documents: int
    approved_documents: int
    rejected_documents: int
    pending_documents: int
    compliance_rate: int
    submitted_date: Optional[datetime] = None
    approved_date: Optional[datetime] = None
    missing_mandatory_documents: List[str] = []
    source: str
    revisions: int = 1


class VendorAgingRow(BaseModel):
    vendor_id: str
    vendor_code: str
    vendor_name: str
    company: str
    email: Optional[str] = None
    assigned_consultant: str
    last_upload_date: Optional[datetime] = None
    days_since_last_upload: Union[int, str]
    status: str
    severity: str
    last_document_type: str


class AgingSummary(BaseModel):
    total_vendors: int = 0
    compliant_vendors: int = 0
    non_compliant_vendors: int = 0
    average_days_since_upload: int = 0
    threshold_days: int


class AgingReport(BaseModel):
    generated_at: datetime
    summary: AgingSummary
    vendors: List[VendorAgingRow]
    unavailable_sources: List[str] = []


class StatusDistributionEntry(BaseModel):
    name: str
    value: int
    status: str
    color: str


class MonthlySubmissionEntry(BaseModel):
    name: str
    count: int
    month: str
    year: Optional[int] = None


class DocumentTypeSummaryEntry(BaseModel):
    document_type: str
    count: int


class VendorPerformanceEntry(BaseModel):
    vendor_id: str
    vendor_name: str
    vendor_company: Optional[str] = None
    total_periods: int
    fully_approved_periods: int
    resubmission_periods: int
    total_documents: int
    approved_documents: int
    compliance_rate: int


# =====================================================
# AGREEMENT MODELS
# =====================================================

class AgreementKind(str, Enum):
    """Which reading of the free-text agreement period applied."""
    DATE_RANGE = "date_range"
    DURATION = "duration"
    PERMANENT = "permanent"
    INVALID = "invalid"


class AgreementTerm(BaseModel):
    kind: AgreementKind
    end_date: Optional[datetime] = None
    duration_months: Optional[int] = None
    reason: Optional[str] = None


class AgreementStatus(BaseModel):
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    agreement_period: str
    kind: AgreementKind
    end_date: Optional[datetime] = None
    days_remaining: Optional[int] = None
    status: str
    is_expiring: bool = False
    is_expired: bool = False


# =====================================================
# RESPONSE MODELS
# =====================================================

class ComplianceReport(BaseModel):
    generated_at: datetime
    filters: SubmissionFilter
    vendor_rows: List[VendorSubmissionStatusRow]
    aging_summary: AgingSummary
    aging: List[VendorAgingRow]
    status_distribution: List[StatusDistributionEntry]
    monthly_submissions: List[MonthlySubmissionEntry]
    document_types: List[DocumentTypeSummaryEntry]
    vendor_performance: List[VendorPerformanceEntry]
    unavailable_sources: List[str] = []


class DashboardStats(BaseModel):
    total_vendors: int = 0
    active_vendors: int = 0
    total_consultants: int = 0
    total_documents: int = 0
    total_periods: int = 0
    compliant_vendors: int = 0
    expiring_agreements: int = 0


class DashboardResponse(BaseModel):
    stats: DashboardStats
    status_distribution: List[StatusDistributionEntry]
    monthly_submissions: List[MonthlySubmissionEntry]
    unavailable_sources: List[str] = []


class VendorComplianceStatus(BaseModel):
    vendor_id: str
    vendor_name: str
    vendor_company: Optional[str] = None
    year: Optional[int] = None
    month: Optional[str] = None
    total_documents: int = 0
    approved_documents: int = 0
    rejected_documents: int = 0
    pending_documents: int = 0
    compliance_score: int = 0
    days_since_last_upload: Union[int, str] = "N/A"
    last_activity: Optional[datetime] = None
    documents: List[NormalizedDocument] = []
    documents_by_type: Dict[str, List[NormalizedDocument]] = {}
    periods: List[VendorSubmissionStatusRow] = []
    agreement: AgreementStatus
    unavailable_sources: List[str] = []
