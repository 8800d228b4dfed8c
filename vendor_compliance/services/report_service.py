from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional, Tuple
import asyncio
import logging

from fastapi import HTTPException

from vendor_compliance.config import settings
from vendor_compliance.models import (
    AgingReport, AgreementStatus, ComplianceReport, DashboardResponse, DashboardStats,
    MonthlySubmissionEntry, StatusDistributionEntry, SubmissionFilter, User, UserStatus,
    VendorComplianceStatus, VendorPeriodRollup, VendorSubmissionStatusRow
)
from vendor_compliance.services.compliance_repository import compliance_repository
from vendor_compliance.services.report_assembler import (
    build_agreement_report, build_document_type_summary, build_monthly_submission_trend,
    build_status_distribution, build_vendor_aging_report, build_vendor_compliance_status,
    build_vendor_performance, build_vendor_status_rows
)
from vendor_compliance.services.status_normalizer import period_status_key
from vendor_compliance.services.submission_aggregator import aggregate_vendor_periods, resolve_month

logger = logging.getLogger(__name__)


class ReportService:
    """Loads reporting sources and runs them through the aggregation pipeline."""

    def __init__(self, repository=None):
        self.repository = repository or compliance_repository

    async def _settle(self, sources: Dict[str, Awaitable[List[Any]]]) -> Tuple[Dict[str, List[Any]], List[str]]:
        """Run independent source queries together; a failed source contributes nothing."""
        names = list(sources)
        results = await asyncio.gather(*sources.values(), return_exceptions=True)

        settled: Dict[str, List[Any]] = {}
        failed: List[str] = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error(f"❌ Report source '{name}' unavailable: {result}")
                settled[name] = []
                failed.append(name)
            else:
                settled[name] = list(result or [])
        return settled, failed

    async def _load_rollups(
        self,
        submission_filter: SubmissionFilter,
        keep_history: bool = False
    ) -> Tuple[List[User], List[User], List[VendorPeriodRollup], List[str]]:
        period_filter = SubmissionFilter(
            year=submission_filter.year,
            month=submission_filter.month,
            vendor=submission_filter.vendor
        )
        sources, failed = await self._settle({
            "vendors": self.repository.list_vendors(),
            "consultants": self.repository.list_consultants(),
            "submissions": self.repository.list_all_submissions(period_filter),
            "legacy_documents": self.repository.list_all_legacy_documents(),
        })

        rollups = aggregate_vendor_periods(
            vendors=sources["vendors"],
            submissions=sources["submissions"],
            legacy_documents=sources["legacy_documents"],
            consultants=sources["consultants"],
            keep_history=keep_history
        )
        rollups = self._apply_filter(rollups, submission_filter)

        logger.info(
            f"Aggregated {len(rollups)} vendor periods from {len(sources['submissions'])} submissions "
            f"and {len(sources['legacy_documents'])} legacy documents"
        )
        return sources["vendors"], sources["consultants"], rollups, failed

    def _apply_filter(self, rollups: List[VendorPeriodRollup], submission_filter: SubmissionFilter) -> List[VendorPeriodRollup]:
        """Period and status filters applied to the derived rows, legacy rows included."""
        month = resolve_month(submission_filter.month) if submission_filter.month else None
        status = period_status_key(submission_filter.status) if submission_filter.status else None

        filtered = []
        for rollup in rollups:
            if submission_filter.vendor and rollup.vendor_id != submission_filter.vendor:
                continue
            if submission_filter.year is not None and rollup.year != submission_filter.year:
                continue
            if submission_filter.month and rollup.month != (month or submission_filter.month):
                continue
            if status and period_status_key(rollup.status) != status:
                continue
            filtered.append(rollup)
        return filtered

    # =====================================================
    # REPORTS
    # =====================================================

    async def get_compliance_report(
        self,
        submission_filter: Optional[SubmissionFilter] = None,
        keep_history: bool = False,
        now: Optional[datetime] = None
    ) -> ComplianceReport:
        """Every admin report view built from one set of vendor period rows."""
        submission_filter = submission_filter or SubmissionFilter()
        now = now or datetime.utcnow()
        vendors, consultants, rollups, failed = await self._load_rollups(submission_filter, keep_history)

        aging_rows, aging_summary = build_vendor_aging_report(
            vendors, rollups, consultants, now,
            threshold_days=settings.non_compliance_threshold_days,
            warning_days=settings.upload_warning_days
        )
        return ComplianceReport(
            generated_at=now,
            filters=submission_filter,
            vendor_rows=build_vendor_status_rows(rollups),
            aging_summary=aging_summary,
            aging=aging_rows,
            status_distribution=build_status_distribution(rollups),
            monthly_submissions=build_monthly_submission_trend(rollups),
            document_types=build_document_type_summary(rollups),
            vendor_performance=build_vendor_performance(rollups),
            unavailable_sources=failed
        )

    async def get_aging_report(self, now: Optional[datetime] = None) -> AgingReport:
        now = now or datetime.utcnow()
        vendors, consultants, rollups, failed = await self._load_rollups(SubmissionFilter())
        rows, summary = build_vendor_aging_report(
            vendors, rollups, consultants, now,
            threshold_days=settings.non_compliance_threshold_days,
            warning_days=settings.upload_warning_days
        )
        logger.info(
            f"Generated aging report for {summary.total_vendors} vendors "
            f"({summary.non_compliant_vendors} non-compliant)"
        )
        return AgingReport(generated_at=now, summary=summary, vendors=rows, unavailable_sources=failed)

    async def get_vendor_submission_rows(
        self,
        submission_filter: Optional[SubmissionFilter] = None,
        keep_history: bool = False
    ) -> List[VendorSubmissionStatusRow]:
        _, _, rollups, _ = await self._load_rollups(submission_filter or SubmissionFilter(), keep_history)
        return build_vendor_status_rows(rollups)

    async def get_status_distribution(self, submission_filter: Optional[SubmissionFilter] = None) -> List[StatusDistributionEntry]:
        _, _, rollups, _ = await self._load_rollups(submission_filter or SubmissionFilter())
        return build_status_distribution(rollups)

    async def get_monthly_submissions(self, year: Optional[int] = None) -> List[MonthlySubmissionEntry]:
        _, _, rollups, _ = await self._load_rollups(SubmissionFilter(year=year))
        return build_monthly_submission_trend(rollups)

    async def get_agreement_report(self, expiring_only: bool = False, now: Optional[datetime] = None) -> List[AgreementStatus]:
        sources, _ = await self._settle({"vendors": self.repository.list_vendors()})
        return build_agreement_report(
            sources["vendors"], now,
            warning_days=settings.agreement_expiry_warning_days,
            expiring_only=expiring_only
        )

    async def get_admin_dashboard(self, now: Optional[datetime] = None) -> DashboardResponse:
        now = now or datetime.utcnow()
        vendors, consultants, rollups, failed = await self._load_rollups(SubmissionFilter())

        _, aging_summary = build_vendor_aging_report(
            vendors, rollups, consultants, now,
            threshold_days=settings.non_compliance_threshold_days,
            warning_days=settings.upload_warning_days
        )
        agreements = build_agreement_report(
            vendors, now, warning_days=settings.agreement_expiry_warning_days, expiring_only=True
        )
        stats = DashboardStats(
            total_vendors=len(vendors),
            active_vendors=sum(1 for vendor in vendors if vendor.status == UserStatus.ACTIVE),
            total_consultants=len(consultants),
            total_documents=sum(rollup.counts.total for rollup in rollups),
            total_periods=len(rollups),
            compliant_vendors=aging_summary.compliant_vendors,
            expiring_agreements=len(agreements)
        )
        return DashboardResponse(
            stats=stats,
            status_distribution=build_status_distribution(rollups),
            monthly_submissions=build_monthly_submission_trend(rollups),
            unavailable_sources=failed
        )

    # =====================================================
    # SINGLE VENDOR
    # =====================================================

    async def _get_vendor(self, vendor_id: str) -> User:
        vendor = await self.repository.get_user_by_id(vendor_id)
        if vendor is None or not vendor.is_vendor:
            raise HTTPException(status_code=404, detail="Vendor not found")
        return vendor

    async def get_vendor_status(
        self,
        vendor_id: str,
        year: Optional[int] = None,
        month: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> VendorComplianceStatus:
        """Counts, compliance score, documents and agreement state for one vendor."""
        now = now or datetime.utcnow()
        vendor = await self._get_vendor(vendor_id)

        # The period filter only applies when both parts are given
        period_year, period_month = (year, month) if year is not None and month else (None, None)

        consultant_sources = {}
        if vendor.assigned_consultant:
            consultant_sources["consultant"] = self._single(self.repository.get_user_by_id(vendor.assigned_consultant))

        sources, failed = await self._settle({
            "submissions": self.repository.list_submissions_for_vendor(vendor_id, period_year, period_month),
            "legacy_documents": self.repository.list_legacy_documents_for_vendor(vendor_id),
            **consultant_sources
        })

        rollups = aggregate_vendor_periods(
            vendors=[vendor],
            submissions=sources["submissions"],
            legacy_documents=sources["legacy_documents"],
            consultants=sources.get("consultant", [])
        )
        rollups = self._apply_filter(
            rollups, SubmissionFilter(vendor=vendor.id, year=period_year, month=period_month)
        )

        status = build_vendor_compliance_status(
            vendor, rollups, now,
            warning_days=settings.agreement_expiry_warning_days,
            year=period_year,
            month=resolve_month(period_month) if period_month else None
        )
        status.unavailable_sources = failed
        logger.info(
            f"Vendor status for {vendor.name}: {status.total_documents} documents, "
            f"{status.compliance_score}% compliant"
        )
        return status

    async def get_vendor_agreement(self, vendor_id: str, now: Optional[datetime] = None) -> AgreementStatus:
        vendor = await self._get_vendor(vendor_id)
        statuses = build_agreement_report(
            [vendor], now, warning_days=settings.agreement_expiry_warning_days
        )
        return statuses[0]

    async def _single(self, lookup: Awaitable[Optional[User]]) -> List[User]:
        user = await lookup
        return [user] if user else []


# Create a singleton instance
report_service = ReportService()
