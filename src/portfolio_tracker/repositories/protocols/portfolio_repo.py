"""Portfolio and cash position repository protocols."""

from typing import Protocol, Optional

from portfolio_tracker.domain.models import Portfolio, CashPosition


class PortfolioRepository(Protocol):
    """Interface for portfolio data access."""

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        ...

    def get_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        """Retrieve portfolio by ID (including soft-deleted ones)."""
        ...

    def list_all(self, include_deleted: bool = False) -> list[Portfolio]:
        """List portfolios in creation order."""
        ...

    def update(self, portfolio: Portfolio) -> Portfolio:
        """Update an existing portfolio."""
        ...


class CashPositionRepository(Protocol):
    """Interface for the standalone cash position store."""

    def get(self, portfolio_id: str) -> Optional[CashPosition]:
        ...

    def upsert(self, position: CashPosition) -> CashPosition:
        ...

    def list_all(self) -> list[CashPosition]:
        ...
