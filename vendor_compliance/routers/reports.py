from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional

from vendor_compliance.models import (
    AgingReport, AgreementStatus, ComplianceReport, DashboardResponse, MonthlySubmissionEntry,
    StatusDistributionEntry, SubmissionFilter, UserRole, VendorSubmissionStatusRow
)
from vendor_compliance.services.jwt_service import jwt_service
from vendor_compliance.services.report_service import report_service

router = APIRouter(prefix="/reports", tags=["Reports"])

require_admin = jwt_service.require_roles(UserRole.ADMIN.value)


@router.get("/compliance", response_model=ComplianceReport)
async def get_compliance_report(
    year: Optional[int] = Query(None, description="Upload period year"),
    month: Optional[str] = Query(None, description="Upload period month, e.g. Apr"),
    status: Optional[str] = Query(None, description="Derived submission status"),
    history: bool = Query(False, description="One row per submission revision instead of the latest"),
    current_user: dict = Depends(require_admin)
):
    """Vendor status table, aging, charts and performance from one aggregation pass."""
    try:
        return await report_service.get_compliance_report(
            SubmissionFilter(year=year, month=month, status=status), keep_history=history
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate compliance report: {str(e)}")


@router.get("/aging", response_model=AgingReport)
async def get_aging_report(current_user: dict = Depends(require_admin)):
    """Days since each vendor's last compliance upload."""
    try:
        return await report_service.get_aging_report()
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate aging report: {str(e)}")


@router.get("/status-distribution", response_model=List[StatusDistributionEntry])
async def get_status_distribution(
    year: Optional[int] = Query(None),
    month: Optional[str] = Query(None),
    current_user: dict = Depends(require_admin)
):
    """Document counts per status for the dashboard pie chart."""
    try:
        return await report_service.get_status_distribution(SubmissionFilter(year=year, month=month))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get status distribution: {str(e)}")


@router.get("/monthly-submissions", response_model=List[MonthlySubmissionEntry])
async def get_monthly_submissions(
    year: Optional[int] = Query(None),
    current_user: dict = Depends(require_admin)
):
    """Submission counts per month for the trend chart."""
    try:
        return await report_service.get_monthly_submissions(year)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get monthly submissions: {str(e)}")


@router.get("/vendor-submissions", response_model=List[VendorSubmissionStatusRow])
async def get_vendor_submissions(
    year: Optional[int] = Query(None),
    month: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    history: bool = Query(False),
    current_user: dict = Depends(require_admin)
):
    """Per-vendor, per-period document status rows."""
    try:
        return await report_service.get_vendor_submission_rows(
            SubmissionFilter(year=year, month=month, status=status), keep_history=history
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get vendor submissions: {str(e)}")


@router.get("/agreements", response_model=List[AgreementStatus])
async def get_agreements(
    expiring_only: bool = Query(False, description="Only expiring or expired agreements"),
    current_user: dict = Depends(require_admin)
):
    try:
        return await report_service.get_agreement_report(expiring_only=expiring_only)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get agreement report: {str(e)}")


@router.get("/dashboard", response_model=DashboardResponse)
async def get_admin_dashboard(current_user: dict = Depends(require_admin)):
    """Headline counts and charts for the admin dashboard."""
    try:
        return await report_service.get_admin_dashboard()
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch admin dashboard data: {str(e)}")
