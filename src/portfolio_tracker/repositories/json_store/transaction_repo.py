"""JSON-file implementation of TransactionRepository."""

from typing import Any, Optional

from portfolio_tracker.core.timezone import parse_trade_date
from portfolio_tracker.domain.models import Transaction, TransactionAction
from portfolio_tracker.repositories.json_store.serialization import (
    to_record,
    to_decimal,
    to_optional_datetime,
)
from portfolio_tracker.repositories.json_store.store import TRANSACTIONS
from portfolio_tracker.repositories.protocols import StorageBackend


class JsonTransactionRepository:
    """Transaction repository backed by `transactions.json`.

    File order is insertion order, which the engine relies on as the
    tie-break for transactions sharing a timestamp.
    """

    def __init__(self, store: StorageBackend):
        self._store = store

    def create(self, transaction: Transaction) -> Transaction:
        self._store.append(TRANSACTIONS, to_record(transaction))
        return transaction

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        for record in self._store.read_all(TRANSACTIONS):
            if record.get("id") == transaction_id:
                return self._to_domain(record)
        return None

    def update(self, transaction: Transaction) -> Transaction:
        updated = self._store.update(TRANSACTIONS, transaction.id, to_record(transaction))
        if updated is None:
            raise ValueError(f"Transaction not found: {transaction.id}")
        return self._to_domain(updated)

    def list_by_portfolio(
        self,
        portfolio_id: str,
        include_deleted: bool = False,
    ) -> list[Transaction]:
        return [
            t for t in self.list_all(include_deleted=include_deleted)
            if t.portfolio_id == portfolio_id
        ]

    def list_all(self, include_deleted: bool = False) -> list[Transaction]:
        transactions = [self._to_domain(r) for r in self._store.read_all(TRANSACTIONS)]
        if include_deleted:
            return transactions
        return [t for t in transactions if not t.deleted]

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> Transaction:
        return Transaction(
            id=record["id"],
            portfolio_id=record["portfolio_id"],
            date=parse_trade_date(record["date"]),
            action=TransactionAction(str(record["action"]).upper()),
            ticker=record["ticker"],
            quantity=to_decimal(record.get("quantity")),
            trade_price=to_decimal(record.get("trade_price")),
            currency=record.get("currency", "USD"),
            exchange=record.get("exchange") or "",
            country=record.get("country") or "",
            fees=to_decimal(record.get("fees")),
            notes=record.get("notes"),
            tag=record.get("tag"),
            deleted=bool(record.get("deleted", False)),
            created_at=to_optional_datetime(record.get("created_at")),
            updated_at=to_optional_datetime(record.get("updated_at")),
        )
