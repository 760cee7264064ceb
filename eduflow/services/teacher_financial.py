"""Member financial report builder.

A compact account report for one member: identity block, headline totals,
totals per transaction source, interest history, the latest transactions and
an opening/closing balance summary.
"""

import re
from datetime import date

from eduflow.domain.models import TeacherFinancialReportData
from eduflow.domain.templates import FinancialReportTemplate, create_default_financial_template
from eduflow.services.formatting import format_date, format_number
from eduflow.services.pdf_generator import RowStyle, TableSpec
from eduflow.services.report_builder import MUTED_COLOR, ReportBuilder

# Only the latest transactions are listed
RECENT_TRANSACTION_LIMIT = 12


class TeacherFinancialReportPDF(ReportBuilder):
    """Builds a member financial report.

    Order: header with generation metadata and teacher block, financial
    summary, transaction breakdown, interest breakdown, recent transactions,
    account statement summary, footer.
    """

    SECTIONS = (
        ("financial_summary", "Financial Summary", 2, "_add_financial_summary"),
        ("transaction_breakdown", "Transaction Breakdown", 2, "_add_transaction_breakdown"),
        ("interest_breakdown", "Interest Earned Breakdown", 2, "_add_interest_breakdown"),
        ("recent_transactions", "Recent Transactions", 2, "_add_recent_transactions"),
        ("statement_summary", "Account Statement Summary", 2, "_add_statement_summary"),
    )

    data: TeacherFinancialReportData
    template: FinancialReportTemplate

    @classmethod
    def default_template(cls) -> FinancialReportTemplate:
        return create_default_financial_template()

    @staticmethod
    def file_name(full_name: str, day: date) -> str:
        """Download name, e.g. ``Ama_Mensah_Financial_Statement_20261018.pdf``."""
        safe_name = re.sub(r"\s+", "_", full_name.strip())
        return f"{safe_name}_Financial_Statement_{day:%Y%m%d}.pdf"

    def _add_header(self) -> None:
        header = self.template.header
        self.generator.set_properties(
            title=header.title,
            author=self.branding.organization_name,
            subject=f"Financial statement for {self.data.teacher.full_name}",
        )
        self.generator.add_header(header.title, header.subtitle, self._logo_url())

        self._add_meta_line(f"Generated: {format_date(self.data.current_date, 'dmy')}")
        if header.show_period:
            self._add_meta_line(f"Period: {self.data.report_period}")
        self.generator.add_spacer(4)

        teacher = self.data.teacher
        self._add_grid(
            [
                ["Full Name", teacher.full_name, "Management Unit", teacher.management_unit],
                ["Employee ID", teacher.employee_id, "Phone", teacher.phone_number or "Not provided"],
                ["Email", teacher.email, "Member Since", format_date(teacher.created_at, "dmy")],
            ],
            [30, 55, 35, 50],
        )

    def _add_meta_line(self, text: str) -> None:
        self.generator.add_text(
            text, font_size=9, color=MUTED_COLOR, align="right", margin_bottom=0
        )

    def _add_grid(self, rows: list[list[str]], widths: list[float], font_size: float = 9) -> None:
        """Label/value grid drawn as a table without a header row."""
        self.generator.add_table(TableSpec(
            headers=[],
            rows=rows,
            column_widths=widths,
            row_style=RowStyle(font_size=font_size),
        ))
        self.generator.add_spacer(8)

    def _add_financial_summary(self) -> None:
        summary = self.data.financial_summary
        self._add_table(
            ["Total Balance", "Total Contributions", "Interest Earned", "Total Withdrawals"],
            [[
                self._money(summary.total_balance),
                self._money(summary.total_contributions),
                self._money(summary.total_interest),
                self._money(summary.total_withdrawals),
            ]],
            [42.5, 42.5, 42.5, 42.5],
            self.template.styling.primary_color,
            header_font_size=9,
            row_font_size=10,
        )
        self.generator.add_spacer(8)

    def _add_transaction_breakdown(self) -> None:
        b = self.data.breakdown
        rows = [
            [label, self._money(total), f"{format_number(count)} transactions"]
            for label, total, count in (
                ("Mobile Money (MoMo)", b.momo_total, b.momo_count),
                ("Controller Reports", b.controller_total, b.controller_count),
                ("Interest Payments", b.interest_total, b.interest_count),
            )
        ]
        self._add_table(
            ["Type", "Amount", "Count"], rows, [70, 50, 50],
            self.template.styling.primary_color,
        )
        self.generator.add_spacer(8)

    def _add_interest_breakdown(self) -> None:
        history = self.data.interest_breakdown
        if history.quarterly:
            rows = [
                [credit.period_label, self._money(credit.amount), format_date(credit.date_paid, "dmy")]
                for credit in history.quarterly
            ]
            self._add_table(
                ["Quarter", "Amount", "Date Paid"], rows, [50, 60, 60],
                self.template.styling.secondary_color,
            )

        totals = history.summary
        self.generator.add_text(
            f"Total Interest Earned: {self._money(totals.total_earned)}",
            font_size=10, font_style="bold", margin_bottom=0,
        )
        self.generator.add_text(f"Payments: {totals.payment_count}", font_size=10, margin_bottom=0)
        if totals.last_payment_date:
            self.generator.add_text(
                f"Last Payment: {format_date(totals.last_payment_date, 'dmy')}",
                font_size=10, margin_bottom=0,
            )
        self.generator.add_spacer(8)

    def _add_recent_transactions(self) -> None:
        transactions = self.data.recent_transactions[:RECENT_TRANSACTION_LIMIT]
        if not transactions:
            self._add_note("No recent transactions.")
            return

        rows = [
            [
                format_date(t.date, "dmy"),
                t.type.capitalize(),
                t.description,
                self._money(t.amount),
                self._money(t.running_balance),
                t.status.capitalize(),
            ]
            for t in transactions
        ]
        self._add_table(
            ["Date", "Type", "Description", "Amount", "Balance", "Status"],
            rows,
            [22, 20, 50, 26, 28, 22],
            self.template.styling.primary_color,
            header_font_size=9,
            row_font_size=8,
        )
        self.generator.add_spacer(8)

    def _add_statement_summary(self) -> None:
        statement = self.data.statement
        self._add_grid(
            [
                ["Opening Balance", self._money(statement.opening_balance),
                 "Total Debits", self._money(statement.total_debits)],
                ["Total Credits", self._money(statement.total_credits),
                 "Closing Balance", self._money(statement.closing_balance)],
            ],
            [40, 45, 40, 45],
            font_size=10,
        )

    def _add_footer(self) -> None:
        self.generator.add_footer(
            f"Generated on {format_date(self.data.current_date)} by "
            f"{self.branding.organization_name}"
        )
