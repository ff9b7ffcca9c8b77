"""Enumerations for domain models."""

from enum import Enum


class TransactionAction(str, Enum):
    """Trade direction of a ledger transaction."""

    BUY = "BUY"
    SELL = "SELL"


class UserActionType(str, Enum):
    """Kinds of user mutations recorded in the audit log."""

    CREATE_PORTFOLIO = "CREATE_PORTFOLIO"
    UPDATE_PORTFOLIO = "UPDATE_PORTFOLIO"
    DELETE_PORTFOLIO = "DELETE_PORTFOLIO"
    ADD_TRANSACTION = "ADD_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    UPDATE_CASH = "UPDATE_CASH"
    SYNC_CASH = "SYNC_CASH"
