"""JSON-file implementations of StockInfoRepository and UserActionRepository."""

import threading
from typing import Any, Optional

from portfolio_tracker.core.timezone import parse_trade_date
from portfolio_tracker.domain.models import StockInfo, UserAction
from portfolio_tracker.repositories.json_store.serialization import (
    to_record,
    to_optional_decimal,
    to_optional_datetime,
)
from portfolio_tracker.repositories.json_store.store import STOCKS, USER_ACTIONS
from portfolio_tracker.repositories.protocols import StorageBackend

MAX_USER_ACTIONS = 1000


class JsonStockInfoRepository:
    """Last-known quote per symbol, backed by `stocks.json`."""

    def __init__(self, store: StorageBackend):
        self._store = store

    def get(self, symbol: str) -> Optional[StockInfo]:
        symbol = symbol.upper()
        for record in self._store.read_all(STOCKS):
            if record.get("symbol") == symbol:
                return self._to_domain(record)
        return None

    def upsert(self, info: StockInfo) -> StockInfo:
        info.symbol = info.symbol.upper()
        self._store.upsert(STOCKS, info.symbol, to_record(info), id_field="symbol")
        return info

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> StockInfo:
        return StockInfo(
            symbol=record["symbol"],
            name=record.get("name") or "",
            sector=record.get("sector"),
            exchange=record.get("exchange") or "",
            currency=record.get("currency"),
            last_price=to_optional_decimal(record.get("last_price")),
            previous_close=to_optional_decimal(record.get("previous_close")),
            last_updated=to_optional_datetime(record.get("last_updated")),
        )


class JsonUserActionRepository:
    """Audit log backed by `user_actions.json`, keeping the newest entries only."""

    def __init__(self, store: StorageBackend, max_entries: int = MAX_USER_ACTIONS):
        self._store = store
        self._max_entries = max_entries
        self._lock = threading.Lock()

    def append(self, action: UserAction) -> UserAction:
        with self._lock:
            records = self._store.read_all(USER_ACTIONS)
            records.append(to_record(action))
            self._store.write_all(USER_ACTIONS, records[-self._max_entries:])
        return action

    def list_recent(self, limit: int = 50) -> list[UserAction]:
        records = self._store.read_all(USER_ACTIONS)
        return [self._to_domain(r) for r in reversed(records[-limit:])]

    @staticmethod
    def _to_domain(record: dict[str, Any]) -> UserAction:
        return UserAction(
            id=record["id"],
            action=record["action"],
            entity_id=record.get("entity_id", ""),
            timestamp=parse_trade_date(record["timestamp"]),
            details=record.get("details") or {},
            portfolio_id=record.get("portfolio_id"),
        )
