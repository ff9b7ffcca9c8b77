"""JSON-file implementations of PortfolioRepository and CashPositionRepository."""

from typing import Any, Optional

from portfolio_tracker.domain.models import Portfolio, CashPosition
from portfolio_tracker.repositories.json_store.serialization import (
    to_record,
    to_decimal,
    to_optional_decimal,
    to_optional_datetime,
)
from portfolio_tracker.repositories.json_store.store import PORTFOLIOS, CASH_POSITIONS
from portfolio_tracker.repositories.protocols import StorageBackend


class JsonPortfolioRepository:
    """Portfolio repository backed by `portfolios.json`."""

    def __init__(self, store: StorageBackend):
        self._store = store

    def create(self, portfolio: Portfolio) -> Portfolio:
        self._store.append(PORTFOLIOS, to_record(portfolio))
        return portfolio

    def get_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        for record in self._store.read_all(PORTFOLIOS):
            if record.get("id") == portfolio_id:
                return self._to_domain(record)
        return None

    def list_all(self, include_deleted: bool = False) -> list[Portfolio]:
        portfolios = [self._to_domain(r) for r in self._store.read_all(PORTFOLIOS)]
        if include_deleted:
            return portfolios
        return [p for p in portfolios if not p.deleted]

    def update(self, portfolio: Portfolio) -> Portfolio:
        updated = self._store.update(PORTFOLIOS, portfolio.id, to_record(portfolio))
        if updated is None:
            raise ValueError(f"Portfolio not found: {portfolio.id}")
        return self._to_domain(updated)

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> Portfolio:
        return Portfolio(
            id=record["id"],
            name=record.get("name", ""),
            currency=record.get("currency", "USD"),
            country=record.get("country", ""),
            description=record.get("description") or "",
            cash_position=to_decimal(record.get("cash_position")),
            target_cash_percent=to_decimal(record.get("target_cash_percent")),
            total_invested=to_decimal(record.get("total_invested")),
            current_value=to_decimal(record.get("current_value")),
            total_return=to_decimal(record.get("total_return")),
            total_return_percent=to_decimal(record.get("total_return_percent")),
            realized_pl=to_decimal(record.get("realized_pl")),
            unrealized_pl=to_decimal(record.get("unrealized_pl")),
            daily_change=to_decimal(record.get("daily_change")),
            daily_change_percent=to_decimal(record.get("daily_change_percent")),
            xirr=to_optional_decimal(record.get("xirr")),
            deleted=bool(record.get("deleted", False)),
            created_at=to_optional_datetime(record.get("created_at")),
            updated_at=to_optional_datetime(record.get("updated_at")),
        )


class JsonCashPositionRepository:
    """Cash position repository backed by `cash_positions.json` (keyed by portfolio)."""

    def __init__(self, store: StorageBackend):
        self._store = store

    def get(self, portfolio_id: str) -> Optional[CashPosition]:
        for record in self._store.read_all(CASH_POSITIONS):
            if record.get("portfolio_id") == portfolio_id:
                return self._to_domain(record)
        return None

    def upsert(self, position: CashPosition) -> CashPosition:
        self._store.upsert(
            CASH_POSITIONS, position.portfolio_id, to_record(position), id_field="portfolio_id"
        )
        return position

    def list_all(self) -> list[CashPosition]:
        return [self._to_domain(r) for r in self._store.read_all(CASH_POSITIONS)]

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> CashPosition:
        return CashPosition(
            portfolio_id=record["portfolio_id"],
            amount=to_decimal(record.get("amount")),
            currency=record.get("currency", "USD"),
            updated_at=to_optional_datetime(record.get("updated_at")),
        )
