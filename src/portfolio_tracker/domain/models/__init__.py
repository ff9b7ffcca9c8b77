"""Domain models package."""

from portfolio_tracker.domain.models.enums import TransactionAction, UserActionType
from portfolio_tracker.domain.models.portfolio import Portfolio, CashPosition
from portfolio_tracker.domain.models.transaction import Transaction
from portfolio_tracker.domain.models.market import StockInfo
from portfolio_tracker.domain.models.user_action import UserAction
from portfolio_tracker.domain.models.cache import CacheEntry

__all__ = [
    "TransactionAction",
    "UserActionType",
    "Portfolio",
    "CashPosition",
    "Transaction",
    "StockInfo",
    "UserAction",
    "CacheEntry",
]
