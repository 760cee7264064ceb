"""Report generation service.

Fetches report data from the savings backend over HTTP, renders it with the
report builders and returns value results. Failures never escape as
exceptions from the ``generate_*`` methods; they come back as results with
``success=False`` and an error message.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union
from uuid import uuid4

import httpx
from pydantic import BaseModel, Field

from eduflow.domain.models import (
    AssociationSummaryData,
    DataShapeError,
    TeacherFinancialReportData,
    TeacherStatementData,
)
from eduflow.domain.settings import ReportSettings
from eduflow.domain.templates import (
    AssociationTemplate,
    FinancialReportTemplate,
    StatementTemplate,
    create_default_association_template,
    create_default_financial_template,
    create_default_teacher_template,
)
from eduflow.services.association_summary import AssociationSummaryPDF
from eduflow.services.balance import BalanceService
from eduflow.services.pdf_generator import TableShapeError
from eduflow.services.teacher_financial import TeacherFinancialReportPDF
from eduflow.services.teacher_statement import TeacherStatementPDF

logger = logging.getLogger(__name__)

TEACHER_DATA_PATH = "/api/reports/teacher/data"
ASSOCIATION_DATA_PATH = "/api/reports/association/data"
TEACHER_FINANCIAL_PATH = "/api/admin/reports/teacher-financial"

REPORT_TYPES = ("teacher_statement", "association_summary", "bulk_statements", "teacher_financial")

Template = Union[StatementTemplate, AssociationTemplate, FinancialReportTemplate]
DateArg = Union[date, str, None]


class ReportServiceError(Exception):
    """Raised when report data cannot be fetched."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


# =============================================================================
# REQUEST / RESULT TYPES
# =============================================================================

class ReportFilters(BaseModel):
    """Data filters for a report request."""

    teacher_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    quarter: Optional[int] = Field(default=None, ge=1, le=4)
    year: Optional[int] = None
    management_unit: Optional[str] = None  # Inert: accepted, not sent to the backend
    include_interest: bool = True  # Inert: interest sections follow the template


class BulkOptions(BaseModel):
    """Options for bulk statement generation."""

    teacher_ids: list[str] = Field(default_factory=list)
    # Inert: every statement is produced as its own file
    format: str = Field(default="individual", pattern="^(individual|combined)$")


class GenerateReportRequest(BaseModel):
    """A report generation request as received from an admin client."""

    type: str = ""
    template_id: Optional[str] = None
    filters: ReportFilters = Field(default_factory=ReportFilters)
    bulk_options: BulkOptions = Field(default_factory=BulkOptions)
    generated_by: str = ""


@dataclass(frozen=True, slots=True)
class ReportGenerationResult:
    """Outcome of a single report generation."""

    success: bool
    report_id: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    content: Optional[bytes] = field(default=None, repr=False)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ReportGenerationResult":
        return cls(success=False, error=error)


@dataclass(frozen=True, slots=True)
class BulkReportResult:
    """Outcome of a bulk statement run, with one result per teacher."""

    success: bool
    job_id: str
    total_reports: int
    estimated_duration: Optional[int] = None
    results: tuple[ReportGenerationResult, ...] = ()
    failed_ids: tuple[str, ...] = ()

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)


def validate_report_request(request: GenerateReportRequest) -> tuple[bool, list[str]]:
    """Check a request before generation.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []

    if not request.type:
        errors.append("Report type is required")
    elif request.type not in REPORT_TYPES:
        errors.append(f"Unknown report type: {request.type}")

    if not request.generated_by:
        errors.append("Generated by field is required")

    if request.type == "teacher_statement" and not request.filters.teacher_id:
        errors.append("Teacher ID is required for teacher statements")

    if request.type == "teacher_financial" and not request.filters.teacher_id:
        errors.append("Teacher ID is required for financial reports")

    if request.type == "bulk_statements" and not request.bulk_options.teacher_ids:
        errors.append("Teacher IDs are required for bulk statements")

    return len(errors) == 0, errors


def _date_param(value: DateArg) -> Optional[str]:
    if value is None or value == "":
        return None
    return value.isoformat() if isinstance(value, date) else str(value)


# =============================================================================
# SERVICE
# =============================================================================

class PDFReportService:
    """Generates teacher statements, financial reports and association summaries.

    Example:
        >>> service = PDFReportService(ReportSettings())
        >>> result = await service.generate_teacher_statement("t-1", generated_by="Admin")
        >>> if result.success:
        ...     Path(result.file_name).write_bytes(result.content)
    """

    def __init__(
        self,
        settings: Optional[ReportSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
        balance_service: Optional[BalanceService] = None,
    ):
        """Initialize the service.

        Args:
            settings: Report settings (defaults used when None)
            client: Shared HTTP client; a short-lived client is opened per
                request when None
            clock: Returns the current time; used for file names and job ids
            balance_service: Running balance calculation
        """
        self.settings = settings or ReportSettings()
        self._client = client
        self._clock = clock or datetime.now
        self._balance = balance_service or BalanceService()
        self._templates: dict[str, Template] = {}

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def register_template(self, template_id: str, template: Template) -> None:
        """Make a template available to requests by id."""
        self._templates[template_id] = template

    def get_template(self, template_id: str) -> Optional[Template]:
        return self._templates.get(template_id)

    def _resolve_template(
        self,
        template: Optional[Template],
        template_id: Optional[str],
        expected: type,
        default: Callable[[], Template],
    ) -> Template:
        if template is not None:
            return template
        if template_id:
            found = self._templates.get(template_id)
            if found is None:
                raise ReportServiceError(f"Template not found: {template_id}")
            if not isinstance(found, expected):
                raise ReportServiceError(
                    f"Template {template_id} is not a {expected.__name__}"
                )
            return found
        return default()

    # -------------------------------------------------------------------------
    # Data fetching
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        token = self.settings.service.auth_token
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _fetch_json(
        self, path: str, params: dict, subject: str, method: str = "GET"
    ) -> Any:
        """Request a JSON body from the report data API.

        GET requests send ``params`` as the query string; POST requests send
        them as a JSON body.

        Raises:
            ReportServiceError: On network failure, non-2xx status or a
                body that is not JSON
        """
        url = f"{self.settings.service.base_url.rstrip('/')}{path}"
        values = {k: v for k, v in params.items() if v is not None}
        payload = {"json": values} if method == "POST" else {"params": values}
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, headers=self._get_headers(), **payload
                )
            else:
                async with httpx.AsyncClient(timeout=self.settings.service.timeout_seconds) as client:
                    response = await client.request(
                        method, url, headers=self._get_headers(), **payload
                    )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Fetching {subject} data from {url} failed: {e}")
            raise ReportServiceError(f"Failed to fetch {subject} data", str(e)) from e

    def _with_metadata(self, payload: dict, generated_by: Optional[str]) -> dict:
        """Fill generation metadata the endpoint did not supply."""
        if not isinstance(payload, dict):
            raise DataShapeError(
                "Expected a JSON object", f"Got {type(payload).__name__}"
            )
        payload = dict(payload)
        payload.setdefault("generated_date", self._today())
        if generated_by:
            payload.setdefault("generated_by", generated_by)
        return payload

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def _store(self, content: bytes, file_name: str) -> ReportGenerationResult:
        """Write the PDF to the output directory or wrap it in a data URI."""
        output_dir = self.settings.service.output_dir
        if output_dir is not None:
            path = Path(output_dir) / file_name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            file_url = path.resolve().as_uri()
        else:
            encoded = base64.b64encode(content).decode("ascii")
            file_url = f"data:application/pdf;base64,{encoded}"

        return ReportGenerationResult(
            success=True,
            report_id=uuid4().hex,
            file_url=file_url,
            file_name=file_name,
            file_size=len(content),
            content=content,
        )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def _guarded(
        self, subject: str, work: Callable[[], Awaitable[ReportGenerationResult]]
    ) -> ReportGenerationResult:
        """Run one generation and convert every failure into a result."""
        try:
            result = await work()
        except ReportServiceError as e:
            return ReportGenerationResult.failure(str(e))
        except (DataShapeError, TableShapeError) as e:
            logger.warning(f"Invalid data for {subject}: {e}")
            return ReportGenerationResult.failure(f"Invalid report data: {e}")
        except OSError as e:
            logger.error(f"Could not write {subject}: {e}")
            return ReportGenerationResult.failure(f"Could not write report: {e}")
        except Exception as e:
            logger.exception(f"Generating {subject} failed")
            return ReportGenerationResult.failure(f"Report generation failed: {e}")

        if result.success:
            logger.info(f"Generated {result.file_name} ({result.file_size} bytes)")
        return result

    async def generate_teacher_statement(
        self,
        teacher_id: str,
        template: Optional[StatementTemplate] = None,
        start_date: DateArg = None,
        end_date: DateArg = None,
        generated_by: Optional[str] = None,
        template_id: Optional[str] = None,
    ) -> ReportGenerationResult:
        """Fetch one teacher's data and render their statement."""

        async def work() -> ReportGenerationResult:
            payload = await self._fetch_json(
                TEACHER_DATA_PATH,
                {
                    "teacher_id": teacher_id,
                    "start_date": _date_param(start_date),
                    "end_date": _date_param(end_date),
                },
                "teacher",
            )
            if payload is None:
                return ReportGenerationResult.failure("Teacher data not found")

            data = TeacherStatementData.from_dict(self._with_metadata(payload, generated_by))
            data = replace(
                data, transactions=tuple(self._balance.compute_running_balances(data.transactions))
            )
            resolved = self._resolve_template(
                template, template_id, StatementTemplate, create_default_teacher_template
            )

            content = TeacherStatementPDF.generate(
                data, resolved, branding=self.settings.branding, balance_service=self._balance
            )
            return self._store(
                content, f"teacher_statement_{data.teacher.employee_id}_{self._today()}.pdf"
            )

        return await self._guarded(f"statement for teacher {teacher_id}", work)

    async def generate_teacher_financial_report(
        self,
        teacher_id: str,
        template: Optional[FinancialReportTemplate] = None,
        start_date: DateArg = None,
        end_date: DateArg = None,
        template_id: Optional[str] = None,
    ) -> ReportGenerationResult:
        """Fetch one teacher's account data and render their financial report.

        The endpoint wraps the report record in a ``data`` object.
        """

        async def work() -> ReportGenerationResult:
            body = await self._fetch_json(
                TEACHER_FINANCIAL_PATH,
                {
                    "teacher_id": teacher_id,
                    "start_date": _date_param(start_date),
                    "end_date": _date_param(end_date),
                    "format": "json",
                },
                "teacher financial",
                method="POST",
            )
            payload = body.get("data") if isinstance(body, dict) else body
            if payload is None:
                return ReportGenerationResult.failure("Teacher financial data not found")
            if isinstance(payload, dict):
                payload = {"current_date": self._today(), **payload}

            data = TeacherFinancialReportData.from_dict(payload)
            resolved = self._resolve_template(
                template, template_id, FinancialReportTemplate, create_default_financial_template
            )

            content = TeacherFinancialReportPDF.generate(
                data, resolved, branding=self.settings.branding
            )
            file_name = TeacherFinancialReportPDF.file_name(
                data.teacher.full_name, self._clock().date()
            )
            return self._store(content, file_name)

        return await self._guarded(f"financial report for teacher {teacher_id}", work)

    async def generate_association_summary(
        self,
        template: Optional[AssociationTemplate] = None,
        start_date: DateArg = None,
        end_date: DateArg = None,
        quarter: Optional[int] = None,
        year: Optional[int] = None,
        generated_by: Optional[str] = None,
        template_id: Optional[str] = None,
    ) -> ReportGenerationResult:
        """Fetch association-wide data and render the summary."""

        async def work() -> ReportGenerationResult:
            payload = await self._fetch_json(
                ASSOCIATION_DATA_PATH,
                {
                    "start_date": _date_param(start_date),
                    "end_date": _date_param(end_date),
                    "quarter": str(quarter) if quarter else None,
                    "year": str(year) if year else None,
                },
                "association",
            )
            if payload is None:
                return ReportGenerationResult.failure("Association data not found")

            data = AssociationSummaryData.from_dict(self._with_metadata(payload, generated_by))
            resolved = self._resolve_template(
                template, template_id, AssociationTemplate, create_default_association_template
            )

            content = AssociationSummaryPDF.generate(data, resolved, branding=self.settings.branding)
            prefix = f"Q{quarter}_" if quarter else ""
            return self._store(
                content,
                f"association_summary_{prefix}{year or self._clock().year}_{self._today()}.pdf",
            )

        return await self._guarded("association summary", work)

    async def generate_bulk_statements(
        self,
        teacher_ids: list[str],
        template: Optional[StatementTemplate] = None,
        start_date: DateArg = None,
        end_date: DateArg = None,
        generated_by: Optional[str] = None,
        template_id: Optional[str] = None,
    ) -> BulkReportResult:
        """Render a statement for each teacher.

        Statements are generated one at a time unless ``bulk_concurrency``
        is raised. Each teacher gets its own result; the run succeeds only
        when every statement succeeded.
        """
        service_settings = self.settings.service
        job_id = f"bulk_{int(self._clock().timestamp() * 1000)}"
        semaphore = asyncio.Semaphore(service_settings.bulk_concurrency)

        async def run_one(teacher_id: str) -> ReportGenerationResult:
            async with semaphore:
                return await self.generate_teacher_statement(
                    teacher_id,
                    template=template,
                    start_date=start_date,
                    end_date=end_date,
                    generated_by=generated_by,
                    template_id=template_id,
                )

        logger.info(f"Bulk job {job_id}: {len(teacher_ids)} statement(s)")
        outcomes = await asyncio.gather(
            *(run_one(t) for t in teacher_ids), return_exceptions=True
        )

        results = []
        for teacher_id, outcome in zip(teacher_ids, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Bulk job {job_id}: statement for {teacher_id} raised {outcome!r}")
                outcome = ReportGenerationResult.failure(f"Report generation failed: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)

        failed = tuple(t for t, r in zip(teacher_ids, results) if not r.success)
        if failed:
            logger.warning(f"Bulk job {job_id}: {len(failed)} statement(s) failed: {list(failed)}")

        return BulkReportResult(
            success=not failed,
            job_id=job_id,
            total_reports=len(teacher_ids),
            estimated_duration=len(teacher_ids) * service_settings.seconds_per_report,
            results=tuple(results),
            failed_ids=failed,
        )

    async def generate(
        self, request: GenerateReportRequest
    ) -> Union[ReportGenerationResult, BulkReportResult]:
        """Validate a request and dispatch it to the matching generator."""
        valid, errors = validate_report_request(request)
        if not valid:
            return ReportGenerationResult.failure("; ".join(errors))

        filters = request.filters
        if request.type == "teacher_statement":
            return await self.generate_teacher_statement(
                filters.teacher_id,
                start_date=filters.start_date,
                end_date=filters.end_date,
                generated_by=request.generated_by,
                template_id=request.template_id,
            )
        if request.type == "teacher_financial":
            return await self.generate_teacher_financial_report(
                filters.teacher_id,
                start_date=filters.start_date,
                end_date=filters.end_date,
                template_id=request.template_id,
            )
        if request.type == "association_summary":
            return await self.generate_association_summary(
                start_date=filters.start_date,
                end_date=filters.end_date,
                quarter=filters.quarter,
                year=filters.year,
                generated_by=request.generated_by,
                template_id=request.template_id,
            )
        return await self.generate_bulk_statements(
            request.bulk_options.teacher_ids,
            start_date=filters.start_date,
            end_date=filters.end_date,
            generated_by=request.generated_by,
            template_id=request.template_id,
        )


def create_pdf_service(base_url: Optional[str] = None, **kwargs: Any) -> PDFReportService:
    """Create a service, optionally pointed at a backend base URL."""
    settings = ReportSettings()
    if base_url is not None:
        settings.service.base_url = base_url
    return PDFReportService(settings, **kwargs)
