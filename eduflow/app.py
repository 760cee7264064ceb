"""Application context and dependency injection.

The ReportContext wires settings, the template registry and the report
service together for scripts and web handlers.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx

from eduflow.domain.settings import LoggingSettings, ReportSettings
from eduflow.domain.templates import (
    AssociationTemplate,
    FinancialReportTemplate,
    StatementTemplate,
    create_default_association_template,
    create_default_financial_template,
    create_default_teacher_template,
)
from eduflow.services.balance import BalanceService
from eduflow.services.report_service import PDFReportService
from eduflow.state.persistence import SettingsStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings) -> None:
    """Apply the configured level to the package loggers."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("eduflow").setLevel(settings.level)


class ReportContext:
    """Application context providing the report service.

    Example:
        >>> ctx = ReportContext()
        >>> result = await ctx.service.generate_teacher_statement("t-1", generated_by="Admin")
        >>> await ctx.close()
    """

    def __init__(
        self,
        settings_path: Optional[Path] = None,
        settings: Optional[ReportSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the context.

        Args:
            settings_path: Optional settings file location
            settings: Settings to use instead of loading them from the store
            client: Optional shared HTTP client
        """
        self.settings_store = SettingsStore(settings_path)
        self.settings: ReportSettings = settings or self.settings_store.load()
        configure_logging(self.settings.logging)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.settings.service.timeout_seconds
        )
        self.balance_service = BalanceService()
        self.service = PDFReportService(
            self.settings, client=self.client, balance_service=self.balance_service
        )
        self._register_default_templates()

    def _register_default_templates(self) -> None:
        theme = self.settings.default_theme
        self.service.register_template(
            "default_teacher", create_default_teacher_template(theme=theme)
        )
        self.service.register_template("default_association", create_default_association_template())
        self.service.register_template("default_financial", create_default_financial_template())

    def register_template(
        self,
        template_id: str,
        template: StatementTemplate | AssociationTemplate | FinancialReportTemplate,
    ) -> None:
        self.service.register_template(template_id, template)

    def save_settings(self) -> None:
        self.settings_store.save(self.settings)
        logger.info(f"Settings saved to {self.settings_store.path}")

    async def close(self) -> None:
        """Close the HTTP client if the context created it."""
        if self._owns_client:
            await self.client.aclose()
