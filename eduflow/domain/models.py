"""Domain records consumed by the report builders.

All records are immutable (frozen dataclasses). They are built by the caller
per report request, or parsed from the JSON bodies served by the report data
endpoints via ``from_dict``, which validates them with pydantic. Parsing
fails closed with ``DataShapeError``.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, TypeAdapter, ValidationError

from eduflow.services.formatting import parse_date


class DataShapeError(ValueError):
    """Raised when a data record is missing fields or has malformed values."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


class TransactionType(Enum):
    """Source of a savings transaction."""

    MOMO = "momo"  # Mobile money
    CONTROLLER = "controller"  # Payroll controller deduction
    INTEREST = "interest"
    DEPOSIT = "deposit"


class TransactionStatus(Enum):
    """Settlement status of a savings transaction."""

    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


# Transaction types that count as member contributions
CONTRIBUTION_TYPES = {
    TransactionType.MOMO,
    TransactionType.CONTROLLER,
    TransactionType.DEPOSIT,
}

# Amounts at or above this magnitude are rejected when parsing
MAX_AMOUNT = Decimal("1e15")


# =============================================================================
# FIELD TYPES
# =============================================================================

def _to_amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("must be a number")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError("must be a number") from None
    if not number.is_finite():
        raise ValueError("must be a number")
    if abs(number) >= MAX_AMOUNT:
        raise ValueError(f"must be a number below {MAX_AMOUNT:,.0f}")
    return number


def _to_day(value: Any) -> date:
    try:
        return parse_date(value)
    except ValueError:
        raise ValueError("must be an ISO date") from None


def _to_text(value: Any) -> Any:
    # Numeric ids are accepted and printed as-is
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


def _to_list(value: Any) -> Any:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError("must be a list")
    return value


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _zero_if_none(value: Any) -> Any:
    return Decimal("0") if value is None else value


def _none_if_empty(value: Any) -> Any:
    return value or None


Amount = Annotated[Decimal, BeforeValidator(_to_amount)]
Day = Annotated[date, BeforeValidator(_to_day)]
Text = Annotated[str, BeforeValidator(_to_text)]


@lru_cache(maxsize=None)
def _adapter(record_type: type) -> TypeAdapter:
    return TypeAdapter(record_type)


def _field_path(loc: tuple) -> str:
    """Render a pydantic error location as ``transactions[1].amount``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _shape_error(error: ValidationError) -> DataShapeError:
    errors = error.errors()
    first = errors[0]
    path = _field_path(first["loc"])
    kind = first["type"]

    if kind == "missing":
        message = f"Missing required field '{path}'"
    elif kind == "enum":
        message = f"Field '{path}' has unknown value {first['input']!r}"
    elif kind in ("dataclass_type", "dataclass_args_type", "dict_type"):
        message = f"Expected an object at '{path}'"
    else:
        reason = first["msg"].removeprefix("Value error, ")
        message = f"Field '{path}': {reason}"

    details = first["msg"]
    if len(errors) > 1:
        details += f" ({len(errors) - 1} more error(s))"
    return DataShapeError(message, details)


def _parse(record_type: type, data: Any) -> Any:
    """Validate a JSON object into a record.

    Raises:
        DataShapeError: If the object is missing fields or malformed
    """
    if not isinstance(data, dict):
        raise DataShapeError("Expected an object", f"Got {type(data).__name__}")
    try:
        return _adapter(record_type).validate_python(data)
    except ValidationError as e:
        raise _shape_error(e) from None


# =============================================================================
# TEACHER STATEMENT
# =============================================================================

@dataclass(frozen=True, slots=True)
class TeacherData:
    """Member (teacher) identity as printed on a statement.

    ``id`` is absent from the financial report body, which identifies the
    member by employee id.
    """

    full_name: Text
    employee_id: Text
    email: Text
    management_unit: Text
    created_at: Day
    phone_number: Optional[Text] = None
    id: Optional[Text] = None

    @classmethod
    def from_dict(cls, data: Any) -> "TeacherData":
        return _parse(cls, data)


@dataclass(frozen=True, slots=True)
class StatementTransaction:
    """One savings transaction line on a statement.

    Amounts are signed: withdrawals and reversals are negative.
    ``running_balance`` is filled in by ``BalanceService``.
    """

    id: Text
    transaction_type: TransactionType
    amount: Amount
    transaction_date: Day
    status: TransactionStatus
    description: Annotated[Text, BeforeValidator(_blank_if_none)] = ""
    payment_method: Optional[Text] = None
    reference_id: Optional[Text] = None
    running_balance: Annotated[Amount, BeforeValidator(_zero_if_none)] = Decimal("0")

    @property
    def is_completed(self) -> bool:
        """Check if this transaction has settled."""
        return self.status == TransactionStatus.COMPLETED

    def with_running_balance(self, balance: Decimal) -> "StatementTransaction":
        """Create a copy carrying the given running balance."""
        return replace(self, running_balance=balance)

    @classmethod
    def from_dict(cls, data: Any) -> "StatementTransaction":
        return _parse(cls, data)


@dataclass(frozen=True, slots=True)
class BalanceData:
    """Balance snapshot for one member."""

    current_balance: Amount
    total_contributions: Amount
    total_interest: Amount
    last_transaction_date: Optional[Day] = None


@dataclass(frozen=True, slots=True)
class QuarterlyPayment:
    """Interest credited to a member for one quarter."""

    quarter: Text
    year: int
    amount: Amount
    payment_date: Day

    @property
    def period_label(self) -> str:
        return f"{self.quarter} {self.year}"


@dataclass(frozen=True, slots=True)
class InterestData:
    """Interest summary for one member."""

    total_interest_earned: Amount
    current_rate: Amount
    quarterly_payments: Annotated[
        tuple[QuarterlyPayment, ...], BeforeValidator(_to_list)
    ] = ()


@dataclass(frozen=True, slots=True)
class StatementPeriod:
    """Inclusive date range covered by a report."""

    start_date: Day
    end_date: Day

    def __post_init__(self) -> None:
        """Validate period ordering."""
        if self.end_date < self.start_date:
            raise DataShapeError("Statement period ends before it starts")


@dataclass(frozen=True, slots=True)
class TeacherStatementData:
    """Everything needed to render one member statement.

    ``balance`` may be omitted by the endpoint; the report service then
    derives it from the transactions.
    """

    teacher: TeacherData
    interest: InterestData
    statement_period: StatementPeriod
    generated_date: Day
    generated_by: Text
    transactions: Annotated[
        tuple[StatementTransaction, ...], BeforeValidator(_to_list)
    ] = ()
    balance: Optional[BalanceData] = None

    @classmethod
    def from_dict(cls, data: Any) -> "TeacherStatementData":
        """Parse the JSON body of the teacher report data endpoint.

        Raises:
            DataShapeError: If the record is missing fields or malformed
        """
        return _parse(cls, data)


# =============================================================================
# ASSOCIATION SUMMARY
# =============================================================================

@dataclass(frozen=True, slots=True)
class SummaryStats:
    """Association-wide membership and balance totals."""

    total_teachers: int
    active_teachers: int
    total_system_balance: Amount
    total_contributions: Amount
    total_interest_paid: Amount
    average_balance_per_teacher: Amount


@dataclass(frozen=True, slots=True)
class ReportPeriod:
    """Period of an association summary; quarter is optional."""

    start_date: Day
    end_date: Day
    year: int
    quarter: Annotated[Optional[int], BeforeValidator(_none_if_empty)] = None

    def __post_init__(self) -> None:
        """Validate quarter number."""
        if self.quarter is not None and not 1 <= self.quarter <= 4:
            raise DataShapeError(f"Quarter must be between 1 and 4, got {self.quarter}")


@dataclass(frozen=True, slots=True)
class TypeBreakdown:
    """Count and amount of transactions of one type."""

    count: int
    amount: Amount


@dataclass(frozen=True, slots=True)
class TypeBreakdowns:
    """Per-type transaction breakdown of an association summary."""

    mobile_money: TypeBreakdown
    controller: TypeBreakdown
    interest: TypeBreakdown


@dataclass(frozen=True, slots=True)
class TransactionStats:
    """Association-wide transaction counts and volume."""

    total_transactions: int
    completed_transactions: int
    pending_transactions: int
    failed_transactions: int
    transaction_volume: Amount
    by_type: TypeBreakdowns

    @property
    def mobile_money(self) -> TypeBreakdown:
        return self.by_type.mobile_money

    @property
    def controller(self) -> TypeBreakdown:
        return self.by_type.controller

    @property
    def interest(self) -> TypeBreakdown:
        return self.by_type.interest


@dataclass(frozen=True, slots=True)
class ManagementUnitStats:
    """Rollup for one management unit (district office)."""

    unit_name: Text
    teacher_count: int
    total_balance: Amount
    average_balance: Amount
    contribution_percentage: Amount


@dataclass(frozen=True, slots=True)
class InterestPaymentPeriod:
    """One executed interest payout."""

    period: Text
    amount: Amount
    teacher_count: int
    payment_date: Day


@dataclass(frozen=True, slots=True)
class InterestPaymentSummary:
    """Interest payout history for the association."""

    total_paid: Amount
    current_rate: Amount
    payment_periods: Annotated[
        tuple[InterestPaymentPeriod, ...], BeforeValidator(_to_list)
    ] = ()


@dataclass(frozen=True, slots=True)
class TopContributor:
    """Entry in the top-contributor ranking."""

    teacher_name: Text
    employee_id: Text
    balance: Amount
    contributions: Amount


@dataclass(frozen=True, slots=True)
class GrowthMetrics:
    """Period-over-period growth figures."""

    new_teachers_this_period: int
    balance_growth_percentage: Amount
    transaction_growth_percentage: Amount
    previous_period_balance: Amount


@dataclass(frozen=True, slots=True)
class AssociationSummaryData:
    """Everything needed to render an association summary."""

    summary: SummaryStats
    period: ReportPeriod
    transactions: TransactionStats
    interest_payments: InterestPaymentSummary
    growth_metrics: GrowthMetrics
    generated_date: Day
    generated_by: Text
    management_units: Annotated[
        tuple[ManagementUnitStats, ...], BeforeValidator(_to_list)
    ] = ()
    top_contributors: Annotated[
        tuple[TopContributor, ...], BeforeValidator(_to_list)
    ] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "AssociationSummaryData":
        """Parse the JSON body of the association report data endpoint.

        Raises:
            DataShapeError: If the record is missing fields or malformed
        """
        return _parse(cls, data)


# =============================================================================
# TEACHER FINANCIAL REPORT
# =============================================================================

@dataclass(frozen=True, slots=True)
class FinancialSummary:
    """Headline totals of a member's account."""

    total_balance: Amount
    total_contributions: Amount
    total_interest: Amount
    total_withdrawals: Amount


@dataclass(frozen=True, slots=True)
class SourceBreakdown:
    """Totals and counts per transaction source."""

    momo_total: Amount
    momo_count: int
    controller_total: Amount
    controller_count: int
    interest_total: Amount
    interest_count: int


@dataclass(frozen=True, slots=True)
class InterestCredit:
    """Interest credited for one quarter."""

    quarter: int
    year: int
    amount: Amount
    date_paid: Day

    @property
    def period_label(self) -> str:
        return f"Q{self.quarter} {self.year}"


@dataclass(frozen=True, slots=True)
class InterestTotals:
    """Lifetime interest figures."""

    total_earned: Amount
    payment_count: int
    last_payment_date: Annotated[Optional[Day], BeforeValidator(_none_if_empty)] = None


@dataclass(frozen=True, slots=True)
class InterestHistory:
    """Quarterly interest credits with their totals."""

    summary: InterestTotals
    quarterly: Annotated[tuple[InterestCredit, ...], BeforeValidator(_to_list)] = ()


@dataclass(frozen=True, slots=True)
class RecentTransaction:
    """Transaction line as served with the financial report.

    Type and status are free text here; the report prints them in sentence
    case.
    """

    date: Day
    type: Annotated[Text, BeforeValidator(_blank_if_none)]
    amount: Amount
    running_balance: Amount
    status: Annotated[Text, BeforeValidator(_blank_if_none)]
    description: Annotated[Text, BeforeValidator(_blank_if_none)] = ""


@dataclass(frozen=True, slots=True)
class AccountStatement:
    """Opening and closing position over the report period."""

    opening_balance: Amount
    total_credits: Amount
    total_debits: Amount
    closing_balance: Amount
    period: Annotated[Text, BeforeValidator(_blank_if_none)] = ""


@dataclass(frozen=True, slots=True)
class TeacherFinancialReportData:
    """Everything needed to render a member's financial report."""

    teacher: TeacherData
    financial_summary: FinancialSummary
    breakdown: SourceBreakdown
    interest_breakdown: InterestHistory
    statement: AccountStatement
    current_date: Day
    report_period: Text
    recent_transactions: Annotated[
        tuple[RecentTransaction, ...], BeforeValidator(_to_list)
    ] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "TeacherFinancialReportData":
        """Parse the ``data`` object of the teacher financial report endpoint.

        Raises:
            DataShapeError: If the record is missing fields or malformed
        """
        return _parse(cls, data)
