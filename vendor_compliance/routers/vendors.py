from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from vendor_compliance.models import AgreementStatus, UserRole, VendorComplianceStatus
from vendor_compliance.services.jwt_service import jwt_service
from vendor_compliance.services.report_service import report_service

router = APIRouter(prefix="/vendors", tags=["Vendors"])

require_reviewer = jwt_service.require_roles(UserRole.ADMIN.value, UserRole.CONSULTANT.value)


@router.get("/{vendor_id}/status", response_model=VendorComplianceStatus)
async def get_vendor_status(
    vendor_id: str,
    year: Optional[int] = Query(None, description="Upload period year (used together with month)"),
    month: Optional[str] = Query(None, description="Upload period month (used together with year)"),
    current_user: dict = Depends(require_reviewer)
):
    """Document counts, compliance score and agreement state for one vendor."""
    try:
        return await report_service.get_vendor_status(vendor_id, year, month)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get vendor status: {str(e)}")


@router.get("/{vendor_id}/agreement", response_model=AgreementStatus)
async def get_vendor_agreement(
    vendor_id: str,
    current_user: dict = Depends(require_reviewer)
):
    """Agreement end date and expiry warning for one vendor."""
    try:
        return await report_service.get_vendor_agreement(vendor_id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get vendor agreement: {str(e)}")
