"""Stock info and audit log repository protocols."""

from typing import Protocol, Optional

from portfolio_tracker.domain.models import StockInfo, UserAction


class StockInfoRepository(Protocol):
    """Interface for last-known quote data per symbol."""

    def get(self, symbol: str) -> Optional[StockInfo]:
        ...

    def upsert(self, info: StockInfo) -> StockInfo:
        ...


class UserActionRepository(Protocol):
    """Interface for the bounded user action log."""

    def append(self, action: UserAction) -> UserAction:
        ...

    def list_recent(self, limit: int = 50) -> list[UserAction]:
        """Most recent first."""
        ...
