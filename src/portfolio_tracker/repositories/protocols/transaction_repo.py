"""Transaction repository protocol."""

from typing import Protocol, Optional

from portfolio_tracker.domain.models import Transaction


class TransactionRepository(Protocol):
    """Interface for transaction data access."""

    def create(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        ...

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Retrieve transaction by ID."""
        ...

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction (soft-delete flag only in practice)."""
        ...

    def list_by_portfolio(
        self,
        portfolio_id: str,
        include_deleted: bool = False,
    ) -> list[Transaction]:
        """List a portfolio's transactions in insertion order."""
        ...

    def list_all(self, include_deleted: bool = False) -> list[Transaction]:
        """List every transaction in insertion order."""
        ...
