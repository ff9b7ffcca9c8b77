"""Audit log entry model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from portfolio_tracker.domain.models.enums import UserActionType


@dataclass
class UserAction:
    """One user mutation, kept in a bounded audit log."""

    id: str
    action: UserActionType
    entity_id: str
    timestamp: datetime
    details: dict[str, Any] = field(default_factory=dict)
    portfolio_id: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            self.action = UserActionType(self.action)
