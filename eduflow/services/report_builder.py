"""Base class for report builders.

A builder turns one data record and one template into a fixed sequence of
``PDFGenerator`` calls. The section order is declared once as data
(``SECTIONS``) and walked by ``build``; template flags switch sections on or
off but never reorder them.
"""

import logging
from typing import Any, ClassVar, Optional

from eduflow.domain.settings import BrandingSettings
from eduflow.services.balance import BalanceService
from eduflow.services.formatting import format_currency
from eduflow.services.pdf_generator import HeaderStyle, PDFGenerator, RowStyle, TableSpec

logger = logging.getLogger(__name__)

# Muted colour for contact lines and "no data" notes
MUTED_COLOR = "#64748b"


class ReportBuilder:
    """Sequences generator calls for one report.

    Subclasses declare ``SECTIONS`` as ``(flag, heading, level, method)``
    tuples and implement ``_add_header`` and ``_add_footer``.
    """

    SECTIONS: ClassVar[tuple[tuple[str, str, int, str], ...]] = ()

    def __init__(
        self,
        data: Any,
        template: Any,
        theme_name: Optional[str] = None,
        branding: Optional[BrandingSettings] = None,
        balance_service: Optional[BalanceService] = None,
    ):
        """Initialize the builder over a fresh generator.

        Args:
            data: The report's data record
            template: Section toggles and styling
            theme_name: Theme key; defaults to the template's theme
            branding: Organisation details printed on the report
            balance_service: Balance calculations
        """
        self.data = data
        self.template = template
        self.branding = branding or BrandingSettings()
        self.balance_service = balance_service or BalanceService()
        self.generator = PDFGenerator(theme_name=theme_name or template.theme)

    @classmethod
    def section_plan(cls) -> list[tuple[str, str]]:
        """The fixed (flag, heading) order of optional sections."""
        return [(flag, heading) for flag, heading, _level, _method in cls.SECTIONS]

    def enabled_sections(self) -> list[str]:
        """Flags of the sections this template renders, in order."""
        return [
            flag for flag, _heading, _level, _method in self.SECTIONS
            if getattr(self.template.sections, flag, False)
        ]

    def build(self) -> PDFGenerator:
        """Run every enabled section and return the populated generator."""
        self._add_header()

        enabled = set(self.enabled_sections())
        for flag, heading, level, method in self.SECTIONS:
            if flag not in enabled:
                continue
            self.generator.add_title(heading, level)
            getattr(self, method)()

        self._add_footer()
        logger.debug(
            f"{type(self).__name__} built {self.generator.page_count} page(s), "
            f"sections: {sorted(enabled)}"
        )
        return self.generator

    def generate_pdf(self) -> bytes:
        """Build the report and render it to PDF bytes."""
        return self.build().get_blob()

    @classmethod
    def generate(
        cls,
        data: Any,
        template: Any = None,
        theme_name: Optional[str] = None,
        **kwargs: Any,
    ) -> bytes:
        """Convenience entry point: build a report and return PDF bytes."""
        if template is None:
            template = cls.default_template()
        return cls(data, template, theme_name=theme_name, **kwargs).generate_pdf()

    @classmethod
    def default_template(cls) -> Any:
        raise NotImplementedError

    def _add_header(self) -> None:
        raise NotImplementedError

    def _add_footer(self) -> None:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def _money(self, amount: Any) -> str:
        return format_currency(amount, self.branding.currency)

    def _logo_url(self) -> Optional[str]:
        return self.branding.logo_url if self.template.header.logo else None

    def _add_contact_line(self, line: str) -> None:
        if self.template.header.contact_info:
            self.generator.add_text(
                line, font_size=8, color=MUTED_COLOR, align="center", margin_bottom=8
            )

    def _add_note(self, text: str, font_size: float = 10, margin_bottom: float = 8) -> None:
        """Muted fallback line for a section without data."""
        self.generator.add_text(
            text, font_size=font_size, color=MUTED_COLOR, margin_bottom=margin_bottom
        )

    def _add_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        column_widths: list[float],
        header_color: str,
        header_font_size: float = 10,
        row_font_size: float = 9,
    ) -> None:
        """Striped table with the report's standard styling."""
        self.generator.add_table(TableSpec(
            headers=headers,
            rows=rows,
            column_widths=column_widths,
            header_style=HeaderStyle(background_color=header_color, font_size=header_font_size),
            row_style=RowStyle(font_size=row_font_size, alternating_rows=True),
        ))
