"""Report templates with Pydantic validation.

A template decides which sections of a report are rendered and how they are
styled. Templates are plain configuration and may be stored as JSON.
"""

from typing import Any

from pydantic import BaseModel, Field

HEX_COLOR = "^#[0-9a-fA-F]{6}$"


class StatementHeader(BaseModel):
    """Header block of a member statement."""

    title: str = "EduFlow - Teachers Savings Statement"
    logo: bool = True
    contact_info: bool = True
    show_period: bool = True

    model_config = {"validate_assignment": True}


class StatementSections(BaseModel):
    """Section toggles of a member statement."""

    personal_info: bool = True
    account_summary: bool = True
    transaction_history: bool = True
    interest_breakdown: bool = True
    payment_methods: bool = True
    charts: bool = False  # Declared for compatibility, never rendered

    model_config = {"validate_assignment": True}


class StatementStyling(BaseModel):
    """Styling of a member statement."""

    primary_color: str = Field(default="#2563eb", pattern=HEX_COLOR)
    secondary_color: str = Field(default="#64748b", pattern=HEX_COLOR)
    font_family: str = "Inter"
    show_charts: bool = False

    model_config = {"validate_assignment": True}


class StatementTemplate(BaseModel):
    """Template for a member (teacher) statement."""

    theme: str = "classic_blue"
    header: StatementHeader = Field(default_factory=StatementHeader)
    sections: StatementSections = Field(default_factory=StatementSections)
    styling: StatementStyling = Field(default_factory=StatementStyling)

    model_config = {"validate_assignment": True, "extra": "forbid"}


class AssociationHeader(BaseModel):
    """Header block of an association summary."""

    title: str = "EduFlow - Quarterly Association Summary"
    logo: bool = True
    contact_info: bool = True
    period_info: bool = True

    model_config = {"validate_assignment": True}


class AssociationSections(BaseModel):
    """Section toggles of an association summary."""

    executive_summary: bool = True
    financial_overview: bool = True
    teacher_statistics: bool = True
    transaction_analysis: bool = True
    interest_payments: bool = True
    management_units: bool = True
    top_contributors: bool = True
    growth_metrics: bool = True

    model_config = {"validate_assignment": True}


class AssociationStyling(BaseModel):
    """Styling of an association summary."""

    primary_color: str = Field(default="#059669", pattern=HEX_COLOR)
    secondary_color: str = Field(default="#64748b", pattern=HEX_COLOR)
    font_family: str = "Inter"
    show_charts: bool = True  # Inert: charts are not rendered
    show_graphs: bool = True  # Inert: graphs are not rendered

    model_config = {"validate_assignment": True}


class AssociationTemplate(BaseModel):
    """Template for an association summary."""

    theme: str = "modern_green"
    header: AssociationHeader = Field(default_factory=AssociationHeader)
    sections: AssociationSections = Field(default_factory=AssociationSections)
    styling: AssociationStyling = Field(default_factory=AssociationStyling)

    model_config = {"validate_assignment": True, "extra": "forbid"}


class FinancialReportHeader(BaseModel):
    """Header block of a member financial report."""

    title: str = "Teacher Financial Statement"
    subtitle: str = "EduFlow Teachers' Savings Association"
    logo: bool = True
    show_period: bool = True

    model_config = {"validate_assignment": True}


class FinancialReportSections(BaseModel):
    """Section toggles of a member financial report."""

    financial_summary: bool = True
    transaction_breakdown: bool = True
    interest_breakdown: bool = True
    recent_transactions: bool = True
    statement_summary: bool = True

    model_config = {"validate_assignment": True}


class FinancialReportStyling(BaseModel):
    """Styling of a member financial report."""

    primary_color: str = Field(default="#3b82f6", pattern=HEX_COLOR)
    secondary_color: str = Field(default="#5a626c", pattern=HEX_COLOR)

    model_config = {"validate_assignment": True}


class FinancialReportTemplate(BaseModel):
    """Template for a member financial report."""

    theme: str = "classic_blue"
    header: FinancialReportHeader = Field(default_factory=FinancialReportHeader)
    sections: FinancialReportSections = Field(default_factory=FinancialReportSections)
    styling: FinancialReportStyling = Field(default_factory=FinancialReportStyling)

    model_config = {"validate_assignment": True, "extra": "forbid"}


def create_default_teacher_template(**overrides: Any) -> StatementTemplate:
    """Create the default statement template with top-level overrides.

    Overrides replace whole top-level blocks; a partial ``sections`` dict
    takes defaults for the keys it omits.

    Example:
        >>> template = create_default_teacher_template(theme="executive")
        >>> template.sections.payment_methods
        True
    """
    return StatementTemplate.model_validate(overrides)


def create_default_association_template(**overrides: Any) -> AssociationTemplate:
    """Create the default association template with top-level overrides."""
    return AssociationTemplate.model_validate(overrides)


def create_default_financial_template(**overrides: Any) -> FinancialReportTemplate:
    """Create the default financial report template with top-level overrides."""
    return FinancialReportTemplate.model_validate(overrides)
