"""JSON flat-file repository implementations."""

from portfolio_tracker.repositories.json_store.store import JsonFileStore
from portfolio_tracker.repositories.json_store.portfolio_repo import (
    JsonPortfolioRepository,
    JsonCashPositionRepository,
)
from portfolio_tracker.repositories.json_store.transaction_repo import JsonTransactionRepository
from portfolio_tracker.repositories.json_store.market_repo import (
    JsonStockInfoRepository,
    JsonUserActionRepository,
)

__all__ = [
    "JsonFileStore",
    "JsonPortfolioRepository",
    "JsonCashPositionRepository",
    "JsonTransactionRepository",
    "JsonStockInfoRepository",
    "JsonUserActionRepository",
]
