"""Repository protocol definitions (interfaces)."""

from portfolio_tracker.repositories.protocols.storage import StorageBackend
from portfolio_tracker.repositories.protocols.portfolio_repo import (
    PortfolioRepository,
    CashPositionRepository,
)
from portfolio_tracker.repositories.protocols.transaction_repo import TransactionRepository
from portfolio_tracker.repositories.protocols.market_repo import (
    StockInfoRepository,
    UserActionRepository,
)

__all__ = [
    "StorageBackend",
    "PortfolioRepository",
    "CashPositionRepository",
    "TransactionRepository",
    "StockInfoRepository",
    "UserActionRepository",
]
