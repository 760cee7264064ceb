"""Pytest fixtures and configuration."""

import copy

import pytest

from eduflow.domain.models import (
    AssociationSummaryData,
    TeacherFinancialReportData,
    TeacherStatementData,
)


TEACHER_PAYLOAD = {
    "teacher": {
        "id": "t-001",
        "full_name": "Ama Mensah",
        "employee_id": "EMP1001",
        "email": "ama.mensah@example.org",
        "management_unit": "New Juaben North",
        "created_at": "2023-02-14T09:30:00Z",
        "phone_number": "+233 20 000 0000",
    },
    "balance": {
        "current_balance": 580,
        "total_contributions": 500,
        "total_interest": 80,
        "last_transaction_date": "2026-07-15",
    },
    "transactions": [
        {
            "id": "tx-1",
            "transaction_type": "momo",
            "amount": 300,
            "description": "Monthly savings",
            "transaction_date": "2026-04-05",
            "status": "completed",
            "payment_method": "momo",
            "reference_id": "MOMO-1",
        },
        {
            "id": "tx-2",
            "transaction_type": "controller",
            "amount": 200,
            "description": "Payroll deduction",
            "transaction_date": "2026-05-28",
            "status": "completed",
        },
        {
            "id": "tx-3",
            "transaction_type": "momo",
            "amount": 150,
            "description": "Top up",
            "transaction_date": "2026-06-10",
            "status": "failed",
            "payment_method": "momo",
        },
        {
            "id": "tx-4",
            "transaction_type": "interest",
            "amount": 80,
            "description": "Q2 interest",
            "transaction_date": "2026-07-15",
            "status": "completed",
        },
    ],
    "interest": {
        "total_interest_earned": 80,
        "current_rate": 0.0425,
        "quarterly_payments": [
            {"quarter": "Q2", "year": 2026, "amount": 80, "payment_date": "2026-07-15"},
        ],
    },
    "statement_period": {"start_date": "2026-04-01", "end_date": "2026-09-30"},
    "generated_date": "2026-10-18",
    "generated_by": "Admin",
}


ASSOCIATION_PAYLOAD = {
    "summary": {
        "total_teachers": 120,
        "active_teachers": 96,
        "total_system_balance": 250000,
        "total_contributions": 230000,
        "total_interest_paid": 20000,
        "average_balance_per_teacher": 2083.33,
    },
    "period": {
        "start_date": "2026-07-01",
        "end_date": "2026-09-30",
        "year": 2026,
        "quarter": 3,
    },
    "transactions": {
        "total_transactions": 540,
        "completed_transactions": 510,
        "pending_transactions": 20,
        "failed_transactions": 10,
        "transaction_volume": 64000,
        "by_type": {
            "mobile_money": {"count": 300, "amount": 36000},
            "controller": {"count": 200, "amount": 24000},
            "interest": {"count": 10, "amount": 4000},
        },
    },
    "interest_payments": {
        "total_paid": 4000,
        "current_rate": 0.0425,
        "payment_periods": [
            {"period": "Q2 2026", "amount": 4000, "teacher_count": 95, "payment_date": "2026-07-15"},
        ],
    },
    "management_units": [
        {
            "unit_name": "New Juaben North",
            "teacher_count": 70,
            "total_balance": 150000,
            "average_balance": 2142.86,
            "contribution_percentage": 60,
        },
        {
            "unit_name": "New Juaben South",
            "teacher_count": 50,
            "total_balance": 100000,
            "average_balance": 2000,
            "contribution_percentage": 40,
        },
    ],
    "top_contributors": [
        {"teacher_name": "Ama Mensah", "employee_id": "EMP1001", "balance": 9000, "contributions": 8500},
        {"teacher_name": "Kofi Boateng", "employee_id": "EMP1002", "balance": 8000, "contributions": 7600},
    ],
    "growth_metrics": {
        "new_teachers_this_period": 6,
        "balance_growth_percentage": 4.5,
        "transaction_growth_percentage": -2.25,
        "previous_period_balance": 239234.45,
    },
    "generated_date": "2026-10-18",
    "generated_by": "Treasurer",
}


FINANCIAL_PAYLOAD = {
    "teacher": {
        "full_name": "Ama Mensah",
        "employee_id": "EMP1001",
        "email": "ama.mensah@example.org",
        "management_unit": "New Juaben North",
        "phone_number": None,
        "created_at": "2023-02-14T09:30:00Z",
    },
    "financial_summary": {
        "total_balance": 580,
        "total_contributions": 500,
        "total_interest": 80,
        "total_withdrawals": 0,
    },
    "breakdown": {
        "momo_total": 300,
        "momo_count": 1,
        "controller_total": 200,
        "controller_count": 1,
        "interest_total": 80,
        "interest_count": 1,
    },
    "interest_breakdown": {
        "quarterly": [
            {"quarter": 2, "year": 2026, "amount": 80, "date_paid": "2026-07-15"},
        ],
        "summary": {
            "total_earned": 80,
            "payment_count": 1,
            "last_payment_date": "2026-07-15",
        },
    },
    "recent_transactions": [
        {
            "date": "2026-07-15",
            "type": "INTEREST",
            "description": "Q2 interest",
            "amount": 80,
            "running_balance": 580,
            "status": "completed",
        },
        {
            "date": "2026-05-28",
            "type": "controller",
            "description": "Payroll deduction",
            "amount": 200,
            "running_balance": 500,
            "status": "completed",
        },
    ],
    "statement": {
        "opening_balance": 0,
        "total_credits": 580,
        "total_debits": 0,
        "closing_balance": 580,
        "period": "April 2026 - September 2026",
    },
    "current_date": "2026-10-18",
    "report_period": "April 2026 - September 2026",
}


@pytest.fixture
def teacher_payload():
    """JSON body as served by the teacher report data endpoint."""
    return copy.deepcopy(TEACHER_PAYLOAD)


@pytest.fixture
def association_payload():
    """JSON body as served by the association report data endpoint."""
    return copy.deepcopy(ASSOCIATION_PAYLOAD)


@pytest.fixture
def financial_payload():
    """Report record as served by the teacher financial report endpoint."""
    return copy.deepcopy(FINANCIAL_PAYLOAD)


@pytest.fixture
def teacher_data(teacher_payload):
    """Parsed sample teacher statement record."""
    return TeacherStatementData.from_dict(teacher_payload)


@pytest.fixture
def association_data(association_payload):
    """Parsed sample association summary record."""
    return AssociationSummaryData.from_dict(association_payload)


@pytest.fixture
def financial_data(financial_payload):
    """Parsed sample financial report record."""
    return TeacherFinancialReportData.from_dict(financial_payload)


@pytest.fixture
def make_transaction_dict():
    """Factory fixture for transaction JSON objects."""

    def _make(**kwargs):
        defaults = {
            "id": "tx",
            "transaction_type": "momo",
            "amount": 100,
            "description": "Savings",
            "transaction_date": "2026-01-01",
            "status": "completed",
            "payment_method": "momo",
        }
        defaults.update(kwargs)
        return defaults

    return _make
