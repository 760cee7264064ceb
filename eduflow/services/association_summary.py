"""Association-wide summary report builder."""

from eduflow.domain.models import AssociationSummaryData
from eduflow.domain.templates import AssociationTemplate, create_default_association_template
from eduflow.services.formatting import (
    format_date,
    format_number,
    format_percentage,
    format_plain_percent,
    format_rate,
)
from eduflow.services.report_builder import ReportBuilder


class AssociationSummaryPDF(ReportBuilder):
    """Builds the association summary.

    Order: header, executive summary, financial overview, teacher
    statistics, transaction analysis, interest payments, management units,
    top contributors, growth metrics, footer.
    """

    SECTIONS = (
        ("executive_summary", "Executive Summary", 1, "_add_executive_summary"),
        ("financial_overview", "Financial Overview", 2, "_add_financial_overview"),
        ("teacher_statistics", "Teacher Statistics", 2, "_add_teacher_statistics"),
        ("transaction_analysis", "Transaction Analysis", 2, "_add_transaction_analysis"),
        ("interest_payments", "Interest Payments", 2, "_add_interest_payments"),
        ("management_units", "Management Units Breakdown", 2, "_add_management_units"),
        ("top_contributors", "Top Contributors", 2, "_add_top_contributors"),
        ("growth_metrics", "Growth Metrics", 2, "_add_growth_metrics"),
    )

    data: AssociationSummaryData
    template: AssociationTemplate

    @classmethod
    def default_template(cls) -> AssociationTemplate:
        return create_default_association_template()

    def _add_header(self) -> None:
        period = self.data.period
        subtitle = None
        if self.template.header.period_info:
            if period.quarter:
                subtitle = f"Q{period.quarter} {period.year} Quarterly Report"
            else:
                subtitle = (
                    f"Period: {format_date(period.start_date)} - "
                    f"{format_date(period.end_date)}"
                )

        self.generator.set_properties(
            title=self.template.header.title,
            author=self.data.generated_by,
            subject=f"Association summary {period.year}",
        )
        self.generator.add_header(self.template.header.title, subtitle, self._logo_url())
        self._add_contact_line(self.branding.association_contact_line)

    def _add_executive_summary(self) -> None:
        summary = self.data.summary
        transactions = self.data.transactions
        highlights = [
            f"Total of {format_number(summary.total_teachers)} registered teachers with "
            f"{format_number(summary.active_teachers)} active members",
            f"System-wide savings balance of {self._money(summary.total_system_balance)}",
            f"Average balance per teacher: {self._money(summary.average_balance_per_teacher)}",
            f"Total interest paid to members: {self._money(summary.total_interest_paid)}",
            f"{format_number(transactions.total_transactions)} transactions processed with "
            f"{self._money(transactions.transaction_volume)} in volume",
        ]
        for highlight in highlights:
            self.generator.add_text(f"• {highlight}", font_size=10, margin_bottom=4)

        self.generator.add_spacer(8)

    def _add_financial_overview(self) -> None:
        summary = self.data.summary
        rows = [
            ["Total System Balance", self._money(summary.total_system_balance)],
            ["Total Contributions", self._money(summary.total_contributions)],
            ["Total Interest Paid", self._money(summary.total_interest_paid)],
            ["Transaction Volume", self._money(self.data.transactions.transaction_volume)],
            ["Average Balance/Teacher", self._money(summary.average_balance_per_teacher)],
        ]
        self._add_table(
            ["Metric", "Amount"], rows, [100, 70],
            self.template.styling.primary_color,
            header_font_size=11, row_font_size=10,
        )
        self.generator.add_spacer(8)

    def _add_teacher_statistics(self) -> None:
        summary = self.data.summary
        rows = [
            ["Total Registered Teachers", format_number(summary.total_teachers)],
            ["Active Teachers", format_number(summary.active_teachers)],
            ["Participation Rate", format_percentage(summary.active_teachers, summary.total_teachers)],
            [
                "New Teachers (This Period)",
                format_number(self.data.growth_metrics.new_teachers_this_period),
            ],
        ]
        self._add_table(
            ["Statistic", "Value"], rows, [100, 70],
            self.template.styling.secondary_color,
            header_font_size=11, row_font_size=10,
        )
        self.generator.add_spacer(8)

    def _add_transaction_analysis(self) -> None:
        stats = self.data.transactions
        status_rows = [
            ["Total Transactions", format_number(stats.total_transactions)],
            ["Completed", format_number(stats.completed_transactions)],
            ["Pending", format_number(stats.pending_transactions)],
            ["Failed", format_number(stats.failed_transactions)],
        ]
        self._add_table(
            ["Status", "Count"], status_rows, [85, 55],
            self.template.styling.primary_color,
        )
        self.generator.add_spacer(5)

        self.generator.add_text(
            "Transactions by Type:", font_size=10, font_style="bold", margin_bottom=4
        )
        type_rows = [
            [label, format_number(breakdown.count), self._money(breakdown.amount)]
            for label, breakdown in (
                ("Mobile Money", stats.mobile_money),
                ("Controller Transfer", stats.controller),
                ("Interest Payment", stats.interest),
            )
        ]
        self._add_table(
            ["Type", "Count", "Amount"], type_rows, [70, 35, 45],
            self.template.styling.secondary_color,
        )
        self.generator.add_spacer(8)

    def _add_interest_payments(self) -> None:
        interest = self.data.interest_payments
        self.generator.add_text(
            f"Current Interest Rate: {format_rate(interest.current_rate)} (Quarterly)",
            font_size=10, font_style="bold", margin_bottom=4,
        )
        self.generator.add_text(
            f"Total Interest Paid This Period: {self._money(interest.total_paid)}",
            font_size=10, margin_bottom=6,
        )

        if interest.payment_periods:
            rows = [
                [
                    p.period,
                    format_date(p.payment_date, "short"),
                    format_number(p.teacher_count),
                    self._money(p.amount),
                ]
                for p in interest.payment_periods
            ]
            self._add_table(
                ["Period", "Payment Date", "Teachers", "Amount"], rows, [40, 40, 30, 40],
                self.template.styling.primary_color,
            )
        else:
            self._add_note(
                "No interest payments recorded for this period.", font_size=9, margin_bottom=4
            )

        self.generator.add_spacer(8)

    def _add_management_units(self) -> None:
        if not self.data.management_units:
            self._add_note("No management unit data available.")
            return

        rows = [
            [
                unit.unit_name,
                format_number(unit.teacher_count),
                self._money(unit.total_balance),
                self._money(unit.average_balance),
                format_plain_percent(unit.contribution_percentage),
            ]
            for unit in self.data.management_units
        ]
        self._add_table(
            ["Management Unit", "Teachers", "Total Balance", "Avg Balance", "% of Total"],
            rows,
            [50, 25, 35, 35, 25],
            self.template.styling.secondary_color,
            header_font_size=9, row_font_size=8,
        )
        self.generator.add_spacer(8)

    def _add_top_contributors(self) -> None:
        if not self.data.top_contributors:
            self._add_note("No contributor data available.")
            return

        rows = [
            [
                str(rank),
                contributor.teacher_name,
                contributor.employee_id,
                self._money(contributor.balance),
                self._money(contributor.contributions),
            ]
            for rank, contributor in enumerate(self.data.top_contributors, start=1)
        ]
        self._add_table(
            ["Rank", "Teacher Name", "Employee ID", "Balance", "Contributions"],
            rows,
            [15, 50, 30, 35, 35],
            self.template.styling.primary_color,
        )
        self.generator.add_spacer(8)

    def _add_growth_metrics(self) -> None:
        growth = self.data.growth_metrics
        rows = [
            ["New Teachers This Period", format_number(growth.new_teachers_this_period)],
            ["Balance Growth", format_plain_percent(growth.balance_growth_percentage)],
            ["Transaction Growth", format_plain_percent(growth.transaction_growth_percentage)],
            ["Previous Period Balance", self._money(growth.previous_period_balance)],
            ["Current Period Balance", self._money(self.data.summary.total_system_balance)],
        ]
        self._add_table(
            ["Metric", "Value"], rows, [100, 70],
            self.template.styling.secondary_color,
            header_font_size=11, row_font_size=10,
        )
        self.generator.add_spacer(8)

    def _add_footer(self) -> None:
        self.generator.add_footer(
            f"Generated on {format_date(self.data.generated_date)} by "
            f"{self.data.generated_by} | {self.branding.organization_name} Management System"
        )
