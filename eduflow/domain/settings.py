"""Report engine settings with Pydantic validation.

Settings are stored as JSON and validated using Pydantic models.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from eduflow.domain.themes import PDF_THEMES


class ServiceSettings(BaseModel):
    """Connection to the report data backend."""

    base_url: str = ""  # e.g. "https://savings.example.org"; empty = relative
    auth_token: Optional[str] = None  # Bearer token for the data endpoints
    timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    # Where generated files are written; None keeps reports in memory
    output_dir: Optional[Path] = None

    # Bulk statement generation
    bulk_concurrency: int = Field(default=1, ge=1, le=16)
    seconds_per_report: int = Field(default=2, ge=0, le=60)

    model_config = {"validate_assignment": True}


class BrandingSettings(BaseModel):
    """Organisation details printed on reports."""

    organization_name: str = "EduFlow - Teachers' Savings Association"
    statement_contact_line: str = (
        "New Juaben Teachers' Savings Association | contact@eduflow.com | +233 XXX XXX XXX"
    )
    association_contact_line: str = (
        "New Juaben Teachers' Savings Association | P.O. Box XXX, Koforidua | contact@eduflow.com"
    )
    logo_url: Optional[str] = None
    currency: str = Field(default="GHS", min_length=3, max_length=3)

    model_config = {"validate_assignment": True}


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    model_config = {"validate_assignment": True}


class ReportSettings(BaseModel):
    """Report engine settings with validation.

    Example:
        >>> settings = ReportSettings()
        >>> settings.service.base_url = "https://savings.example.org"
        >>> settings.default_theme = "executive"
    """

    default_theme: str = "classic_blue"
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    branding: BrandingSettings = Field(default_factory=BrandingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }

    @field_validator("default_theme")
    @classmethod
    def _known_theme(cls, value: str) -> str:
        if value not in PDF_THEMES:
            raise ValueError(f"Unknown theme: {value}")
        return value
