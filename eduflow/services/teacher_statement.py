"""Member (teacher) savings statement builder."""

from eduflow.domain.models import BalanceData, TeacherStatementData
from eduflow.domain.templates import StatementTemplate, create_default_teacher_template
from eduflow.services.formatting import (
    format_date,
    format_percentage,
    format_rate,
    format_status,
    format_transaction_type,
)
from eduflow.services.report_builder import ReportBuilder


class TeacherStatementPDF(ReportBuilder):
    """Builds a member statement.

    Order: header, personal information, account summary, transaction
    history, interest breakdown, payment methods, footer.
    """

    SECTIONS = (
        ("personal_info", "Personal Information", 2, "_add_personal_information"),
        ("account_summary", "Account Summary", 2, "_add_account_summary"),
        ("transaction_history", "Transaction History", 2, "_add_transaction_history"),
        ("interest_breakdown", "Interest Breakdown", 2, "_add_interest_breakdown"),
        ("payment_methods", "Payment Methods Summary", 2, "_add_payment_methods_summary"),
    )

    data: TeacherStatementData
    template: StatementTemplate

    @classmethod
    def default_template(cls) -> StatementTemplate:
        return create_default_teacher_template()

    @property
    def balance(self) -> BalanceData:
        """Balance snapshot; derived from the transactions when not supplied."""
        if self.data.balance is not None:
            return self.data.balance
        return self.balance_service.summarize(self.data.transactions)

    def _add_header(self) -> None:
        period = self.data.statement_period
        subtitle = None
        if self.template.header.show_period:
            subtitle = (
                f"Statement Period: {format_date(period.start_date)} - "
                f"{format_date(period.end_date)}"
            )

        self.generator.set_properties(
            title=self.template.header.title,
            author=self.data.generated_by,
            subject=f"Savings statement for {self.data.teacher.full_name}",
        )
        self.generator.add_header(self.template.header.title, subtitle, self._logo_url())
        self._add_contact_line(self.branding.statement_contact_line)

    def _add_personal_information(self) -> None:
        teacher = self.data.teacher
        personal_info = [
            ("Full Name:", teacher.full_name),
            ("Employee ID:", teacher.employee_id),
            ("Management Unit:", teacher.management_unit),
            ("Email:", teacher.email),
            ("Phone:", teacher.phone_number or "Not provided"),
            ("Member Since:", format_date(teacher.created_at, "month_year")),
        ]
        for label, value in personal_info:
            self.generator.add_text(f"{label} {value}", font_size=10, margin_bottom=3)

        self.generator.add_spacer(8)

    def _add_account_summary(self) -> None:
        balance = self.balance
        last = (
            format_date(balance.last_transaction_date)
            if balance.last_transaction_date
            else "No transactions"
        )
        rows = [
            ["Current Balance", self._money(balance.current_balance)],
            ["Total Contributions", self._money(balance.total_contributions)],
            ["Total Interest Earned", self._money(balance.total_interest)],
            ["Last Transaction", last],
        ]
        self._add_table(
            ["Description", "Amount/Date"],
            rows,
            [100, 70],
            self.template.styling.primary_color,
            header_font_size=11,
            row_font_size=10,
        )
        self.generator.add_spacer(8)

    def _add_transaction_history(self) -> None:
        if not self.data.transactions:
            self._add_note("No transactions found for the selected period.")
            return

        rows = [
            [
                format_date(t.transaction_date, "short"),
                format_transaction_type(t.transaction_type.value),
                t.description,
                self._money(t.amount),
                format_status(t.status.value),
                self._money(t.running_balance),
            ]
            for t in self.data.transactions
        ]
        self._add_table(
            ["Date", "Type", "Description", "Amount", "Status", "Balance"],
            rows,
            [25, 25, 45, 25, 20, 30],
            self.template.styling.primary_color,
            header_font_size=9,
            row_font_size=8,
        )
        self.generator.add_spacer(8)

    def _add_interest_breakdown(self) -> None:
        interest = self.data.interest
        self.generator.add_text(
            f"Current Interest Rate: {format_rate(interest.current_rate)} (Quarterly)",
            font_size=10, font_style="bold", margin_bottom=4,
        )
        self.generator.add_text(
            f"Total Interest Earned: {self._money(interest.total_interest_earned)}",
            font_size=10, margin_bottom=6,
        )

        if interest.quarterly_payments:
            self.generator.add_text(
                "Quarterly Interest Payments:", font_size=10, font_style="bold", margin_bottom=4
            )
            rows = [
                [p.period_label, format_date(p.payment_date, "short"), self._money(p.amount)]
                for p in interest.quarterly_payments
            ]
            self._add_table(
                ["Period", "Payment Date", "Amount"],
                rows,
                [50, 50, 50],
                self.template.styling.secondary_color,
            )
        else:
            self._add_note(
                "No interest payments found for the selected period.",
                font_size=9, margin_bottom=4,
            )

        self.generator.add_spacer(8)

    def _add_payment_methods_summary(self) -> None:
        totals = self.balance_service.payment_method_totals(self.data.transactions)
        if not totals:
            self._add_note("No completed transactions found for the selected period.")
            return

        contributions = self.balance.total_contributions
        rows = [
            [method, self._money(amount), format_percentage(amount, contributions)]
            for method, amount in totals.items()
        ]
        self._add_table(
            ["Payment Method", "Total Amount", "Percentage"],
            rows,
            [70, 40, 40],
            self.template.styling.secondary_color,
        )
        self.generator.add_spacer(8)

    def _add_footer(self) -> None:
        self.generator.add_footer(
            f"Generated on {format_date(self.data.generated_date)} by "
            f"{self.data.generated_by} | {self.branding.organization_name}"
        )
