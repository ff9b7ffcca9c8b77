"""Ledger service for portfolios, transactions and cash positions."""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from portfolio_tracker.core.currencies import SUPPORTED_CURRENCIES, get_country_currency
from portfolio_tracker.core.exceptions import (
    ConflictError,
    InsufficientSharesError,
    NotFoundError,
    ValidationError,
)
from portfolio_tracker.core.locks import KeyedLocks
from portfolio_tracker.core.timezone import now_eastern, to_eastern
from portfolio_tracker.domain.models import (
    CashPosition,
    Portfolio,
    Transaction,
    TransactionAction,
    UserAction,
    UserActionType,
)
from portfolio_tracker.repositories.protocols import (
    CashPositionRepository,
    PortfolioRepository,
    TransactionRepository,
    UserActionRepository,
)
from portfolio_tracker.services.portfolio_engine import fold_transactions, sort_transactions
from portfolio_tracker.services.result_cache import ResultCache

logger = logging.getLogger(__name__)


def find_oversell(
    transactions: Iterable[Transaction],
) -> Optional[tuple[Transaction, Decimal]]:
    """First SELL, in replay order, for more than was held at that point, with the quantity held."""
    held: dict[str, Decimal] = defaultdict(Decimal)
    for txn in sort_transactions(transactions):
        if txn.deleted:
            continue
        if txn.action == TransactionAction.BUY:
            held[txn.ticker] += txn.quantity
        elif txn.quantity > held[txn.ticker]:
            return txn, held[txn.ticker]
        else:
            held[txn.ticker] -= txn.quantity
    return None


@dataclass
class TransactionCreate:
    """Input data for recording a trade."""

    portfolio_id: str
    action: TransactionAction
    ticker: str
    quantity: Decimal
    trade_price: Decimal
    date: Optional[datetime] = None
    currency: Optional[str] = None
    exchange: Optional[str] = None
    country: Optional[str] = None
    fees: Decimal = Decimal("0")
    notes: Optional[str] = None
    tag: Optional[str] = None


@dataclass
class PortfolioUpdate:
    """Editable portfolio fields; currency and country are fixed at creation."""

    name: Optional[str] = None
    description: Optional[str] = None
    target_cash_percent: Optional[Decimal] = None


class LedgerService:
    """
    Service for managing portfolios and the transaction ledger.

    The ledger is the source of truth: transactions are appended and only
    ever soft-deleted. Writes to one portfolio are serialized, and every
    mutation is audited and clears the result cache.
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        transaction_repo: TransactionRepository,
        cash_repo: CashPositionRepository,
        user_action_repo: UserActionRepository,
        cache: ResultCache,
        locks: Optional[KeyedLocks] = None,
        reject_oversell: bool = True,
    ):
        self._portfolio_repo = portfolio_repo
        self._transaction_repo = transaction_repo
        self._cash_repo = cash_repo
        self._user_action_repo = user_action_repo
        self._cache = cache
        self._locks = locks or KeyedLocks()
        self._reject_oversell = reject_oversell

    # ------------------------------------------------------------------
    # Portfolios
    # ------------------------------------------------------------------

    def create_portfolio(
        self,
        name: str,
        country: str = "USA",
        description: str = "",
        cash_position: Decimal = Decimal("0"),
        target_cash_percent: Decimal = Decimal("0"),
    ) -> Portfolio:
        """
        Create a portfolio; its currency is derived from `country`.

        Args:
            name: Display name (required)
            country: Country name or code, e.g. "USA", "India", "UK"
            description: Free text
            cash_position: Opening cash in the portfolio currency
            target_cash_percent: Desired cash share, 0-100
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Portfolio name is required")
        if cash_position < 0:
            raise ValidationError("Cash position cannot be negative")
        self._validate_target_cash(target_cash_percent)

        now = now_eastern()
        currency = get_country_currency(country)
        portfolio = Portfolio(
            id=str(uuid.uuid4()),
            name=name,
            currency=currency,
            country=(country or "").strip(),
            description=description or "",
            cash_position=cash_position,
            target_cash_percent=target_cash_percent,
            created_at=now,
            updated_at=now,
        )
        created = self._portfolio_repo.create(portfolio)
        self._cash_repo.upsert(
            CashPosition(
                portfolio_id=created.id,
                amount=cash_position,
                currency=currency,
                updated_at=now,
            )
        )
        self._record(UserActionType.CREATE_PORTFOLIO, created.id, created.id, name=name)
        return created

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        """Get a live portfolio by ID."""
        portfolio = self._portfolio_repo.get_by_id(portfolio_id)
        if portfolio is None or portfolio.deleted:
            raise NotFoundError("Portfolio", portfolio_id)
        return portfolio

    def list_portfolios(self, include_deleted: bool = False) -> list[Portfolio]:
        return self._portfolio_repo.list_all(include_deleted=include_deleted)

    def update_portfolio(self, portfolio_id: str, patch: PortfolioUpdate) -> Portfolio:
        with self._locks.lock_for(portfolio_id):
            portfolio = self.get_portfolio(portfolio_id)
            if patch.name is not None:
                if not patch.name.strip():
                    raise ValidationError("Portfolio name is required")
                portfolio.name = patch.name.strip()
            if patch.description is not None:
                portfolio.description = patch.description
            if patch.target_cash_percent is not None:
                self._validate_target_cash(patch.target_cash_percent)
                portfolio.target_cash_percent = patch.target_cash_percent
            portfolio.updated_at = now_eastern()
            updated = self._portfolio_repo.update(portfolio)
        self._record(UserActionType.UPDATE_PORTFOLIO, portfolio_id, portfolio_id)
        return updated

    def soft_delete_portfolio(self, portfolio_id: str, force: bool = False) -> int:
        """
        Soft delete a portfolio.

        Refuses while live transactions exist unless `force`, in which case
        those transactions are soft-deleted too. Returns how many were.
        """
        with self._locks.lock_for(portfolio_id):
            portfolio = self.get_portfolio(portfolio_id)
            live = self._transaction_repo.list_by_portfolio(portfolio_id)
            if live and not force:
                raise ConflictError(
                    f"Portfolio '{portfolio.name}' has {len(live)} transactions; "
                    "delete with force to remove them as well"
                )
            now = now_eastern()
            for txn in live:
                txn.deleted = True
                txn.updated_at = now
                self._transaction_repo.update(txn)
            portfolio.deleted = True
            portfolio.updated_at = now
            self._portfolio_repo.update(portfolio)

        self._record(
            UserActionType.DELETE_PORTFOLIO,
            portfolio_id,
            portfolio_id,
            cascaded_transactions=len(live),
        )
        return len(live)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(self, data: TransactionCreate) -> Transaction:
        """
        Append a trade to the ledger.

        Currency and country default to the portfolio's. A SELL is rejected
        when replaying the whole ledger with it leaves any sale, earlier or
        later, selling more than was held at that point.
        """
        with self._locks.lock_for(data.portfolio_id):
            portfolio = self._validate_transaction_create(data)

            ticker = data.ticker.strip().upper()
            trade_date = to_eastern(data.date) if data.date else now_eastern()
            action = TransactionAction(data.action)

            transaction = Transaction(
                id=str(uuid.uuid4()),
                portfolio_id=portfolio.id,
                date=trade_date,
                action=action,
                ticker=ticker,
                quantity=data.quantity,
                trade_price=data.trade_price,
                currency=(data.currency or portfolio.currency).upper(),
                exchange=(data.exchange or "").strip().upper(),
                country=(data.country or portfolio.country).strip(),
                fees=data.fees,
                notes=data.notes,
                tag=data.tag,
                created_at=now_eastern(),
            )
            if action == TransactionAction.SELL:
                existing = self._transaction_repo.list_by_portfolio(portfolio.id)
                self._check_oversell(existing, existing + [transaction])
            created = self._transaction_repo.create(transaction)

        self._record(
            UserActionType.ADD_TRANSACTION,
            created.id,
            created.portfolio_id,
            trade_action=created.action.value,
            ticker=created.ticker,
            quantity=str(created.quantity),
            trade_price=str(created.trade_price),
        )
        return created

    def soft_delete_transaction(self, transaction_id: str) -> None:
        """
        Soft delete a transaction (idempotent).

        Deleting a BUY that a later SELL depends on is rejected.
        """
        transaction = self._transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        if transaction.deleted:
            return

        with self._locks.lock_for(transaction.portfolio_id):
            if transaction.action == TransactionAction.BUY:
                existing = self._transaction_repo.list_by_portfolio(transaction.portfolio_id)
                self._check_oversell(existing, [t for t in existing if t.id != transaction_id])
            transaction.deleted = True
            transaction.updated_at = now_eastern()
            self._transaction_repo.update(transaction)

        self._record(
            UserActionType.DELETE_TRANSACTION,
            transaction_id,
            transaction.portfolio_id,
            ticker=transaction.ticker,
        )

    def get_transaction(self, transaction_id: str) -> Transaction:
        transaction = self._transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    def list_transactions(
        self,
        portfolio_id: Optional[str] = None,
        include_deleted: bool = False,
    ) -> list[Transaction]:
        """Transactions, newest first; all portfolios when portfolio_id is None."""
        if portfolio_id is not None:
            transactions = self._transaction_repo.list_by_portfolio(
                portfolio_id, include_deleted=include_deleted
            )
        else:
            transactions = self._transaction_repo.list_all(include_deleted=include_deleted)
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def quantity_held(
        self,
        portfolio_id: str,
        ticker: str,
        as_of: Optional[datetime] = None,
    ) -> Decimal:
        """Quantity of `ticker` held in the portfolio, optionally as of a date."""
        transactions = self._transaction_repo.list_by_portfolio(portfolio_id)
        if as_of is not None:
            transactions = [t for t in transactions if t.date <= as_of]
        position = fold_transactions(transactions).positions.get(ticker.upper())
        return position.quantity if position else Decimal("0")

    # ------------------------------------------------------------------
    # Cash
    # ------------------------------------------------------------------

    def get_cash_position(self, portfolio_id: str) -> Decimal:
        """Cash in the portfolio currency; the cash store wins over the portfolio record."""
        portfolio = self.get_portfolio(portfolio_id)
        position = self._cash_repo.get(portfolio_id)
        return position.amount if position else portfolio.cash_position

    def update_cash_position(self, portfolio_id: str, amount: Decimal) -> Portfolio:
        """Set the cash balance in both the cash store and the portfolio record."""
        if amount < 0:
            raise ValidationError("Cash position cannot be negative")
        with self._locks.lock_for(portfolio_id):
            portfolio = self.get_portfolio(portfolio_id)
            now = now_eastern()
            previous = portfolio.cash_position
            self._cash_repo.upsert(
                CashPosition(
                    portfolio_id=portfolio_id,
                    amount=amount,
                    currency=portfolio.currency,
                    updated_at=now,
                )
            )
            portfolio.cash_position = amount
            portfolio.updated_at = now
            updated = self._portfolio_repo.update(portfolio)

        self._record(
            UserActionType.UPDATE_CASH,
            portfolio_id,
            portfolio_id,
            previous=str(previous),
            amount=str(amount),
        )
        return updated

    def sync_cash_positions(self) -> list[str]:
        """
        Reconcile the cash store with portfolio records.

        Where a cash store entry exists it wins and the portfolio record is
        corrected; otherwise the portfolio record seeds the cash store.
        Returns the ids of portfolios that were changed.
        """
        changed: list[str] = []
        for portfolio in self._portfolio_repo.list_all():
            with self._locks.lock_for(portfolio.id):
                position = self._cash_repo.get(portfolio.id)
                if position is None:
                    self._cash_repo.upsert(
                        CashPosition(
                            portfolio_id=portfolio.id,
                            amount=portfolio.cash_position,
                            currency=portfolio.currency,
                            updated_at=now_eastern(),
                        )
                    )
                    changed.append(portfolio.id)
                elif position.amount != portfolio.cash_position:
                    logger.info(
                        "Cash mismatch for portfolio %s: record=%s store=%s",
                        portfolio.id, portfolio.cash_position, position.amount,
                    )
                    portfolio.cash_position = position.amount
                    portfolio.updated_at = now_eastern()
                    self._portfolio_repo.update(portfolio)
                    changed.append(portfolio.id)

        if changed:
            self._record(UserActionType.SYNC_CASH, "cash_positions", None, portfolios=changed)
        return changed

    def list_user_actions(self, limit: int = 50) -> list[UserAction]:
        return self._user_action_repo.list_recent(limit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_transaction_create(self, data: TransactionCreate) -> Portfolio:
        """Validate trade input; returns the owning portfolio."""
        portfolio = self._portfolio_repo.get_by_id(data.portfolio_id)
        if portfolio is None or portfolio.deleted:
            raise NotFoundError("Portfolio", data.portfolio_id)

        if not data.ticker or not data.ticker.strip():
            raise ValidationError("Ticker is required")
        try:
            TransactionAction(data.action)
        except ValueError as exc:
            raise ValidationError(f"Unknown action: {data.action}") from exc
        if data.quantity is None or data.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if data.trade_price is None or data.trade_price <= 0:
            raise ValidationError("Trade price must be greater than 0")
        if data.fees < 0:
            raise ValidationError("Fees cannot be negative")
        if data.currency and data.currency.upper() not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {data.currency}")
        return portfolio

    def _check_oversell(
        self,
        before: list[Transaction],
        after: list[Transaction],
    ) -> None:
        """Reject a ledger change that makes some SELL exceed its holding."""
        if not self._reject_oversell:
            return
        violation = find_oversell(after)
        if violation is None:
            return
        if find_oversell(before) is not None:
            # Legacy data is already oversold; nothing new to reject.
            logger.warning("Portfolio ledger already contains an oversold SELL")
            return
        sell, held = violation
        raise InsufficientSharesError(sell.ticker, str(sell.quantity), str(held))

    @staticmethod
    def _validate_target_cash(value: Decimal) -> None:
        if value < 0 or value > 100:
            raise ValidationError("Target cash percent must be between 0 and 100")

    def _record(
        self,
        action: UserActionType,
        entity_id: str,
        portfolio_id: Optional[str],
        **details: Any,
    ) -> None:
        """Audit the mutation and invalidate cached aggregates."""
        self._user_action_repo.append(
            UserAction(
                id=str(uuid.uuid4()),
                action=action,
                entity_id=entity_id,
                timestamp=now_eastern(),
                details=details,
                portfolio_id=portfolio_id,
            )
        )
        self._cache.mark_global_refresh()
