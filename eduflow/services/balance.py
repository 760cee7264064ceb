"""Balance calculation service.

Computes running balances and balance snapshots from savings transactions.
Only completed transactions count toward a balance.
"""

from decimal import Decimal
from typing import Iterable

from eduflow.domain.models import (
    CONTRIBUTION_TYPES,
    BalanceData,
    StatementTransaction,
    TransactionType,
)
from eduflow.services.formatting import payment_method_label


class BalanceService:
    """Calculates balances from savings transactions.

    The service respects transaction status:
    - COMPLETED transactions count toward the balance
    - PENDING and FAILED transactions are listed but never counted
    """

    def compute_total(self, transactions: Iterable[StatementTransaction]) -> Decimal:
        """Compute the balance from completed transactions.

        Example:
            >>> service = BalanceService()
            >>> service.compute_total(transactions)
            Decimal('150.00')
        """
        return sum((t.amount for t in transactions if t.is_completed), Decimal("0"))

    def compute_running_balances(
        self, transactions: Iterable[StatementTransaction]
    ) -> list[StatementTransaction]:
        """Sort transactions by date and attach a running balance to each.

        Ties on date keep their input order. A non-completed transaction
        carries the balance reached so far without adding its own amount.

        Args:
            transactions: Transactions in any order

        Returns:
            New transaction records sorted ascending by date

        Example:
            >>> rows = service.compute_running_balances(transactions)
            >>> [r.running_balance for r in rows]
            [Decimal('100'), Decimal('100'), Decimal('150')]
        """
        running = Decimal("0")
        result = []

        # sorted() is stable, so equal dates keep input order
        for t in sorted(transactions, key=lambda x: x.transaction_date):
            if t.is_completed:
                running += t.amount
            result.append(t.with_running_balance(running))

        return result

    def summarize(self, transactions: Iterable[StatementTransaction]) -> BalanceData:
        """Build a balance snapshot from a member's transactions.

        Contributions are completed mobile money, controller and deposit
        transactions; interest is completed interest credits.
        """
        completed = [
            t for t in sorted(transactions, key=lambda x: x.transaction_date)
            if t.is_completed
        ]
        contributions = sum(
            (t.amount for t in completed if t.transaction_type in CONTRIBUTION_TYPES),
            Decimal("0"),
        )
        interest = sum(
            (t.amount for t in completed if t.transaction_type == TransactionType.INTEREST),
            Decimal("0"),
        )
        return BalanceData(
            current_balance=self.compute_total(completed),
            total_contributions=contributions,
            total_interest=interest,
            last_transaction_date=completed[-1].transaction_date if completed else None,
        )

    def payment_method_totals(
        self, transactions: Iterable[StatementTransaction]
    ) -> dict[str, Decimal]:
        """Sum completed amounts per payment-method label, in first-seen order."""
        totals: dict[str, Decimal] = {}
        for t in transactions:
            if not t.is_completed:
                continue
            label = payment_method_label(t.transaction_type.value, t.payment_method)
            totals[label] = totals.get(label, Decimal("0")) + t.amount
        return totals
