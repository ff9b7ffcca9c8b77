"""Application-level exceptions.

Each error carries a machine-readable `code` and the HTTP status the API
answers with.
"""


class AppError(Exception):
    """Base exception for application errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Bad or missing input."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """A required portfolio, transaction or quote does not exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ConflictError(AppError):
    """The operation would leave dependent data behind (e.g. live transactions)."""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class InsufficientSharesError(AppError):
    """A SELL for more than the quantity held on its trade date."""

    def __init__(self, ticker: str, requested: str, held: str):
        self.ticker = ticker
        self.requested = requested
        self.held = held
        super().__init__(
            f"Cannot sell {requested} {ticker}: only {held} held on the trade date",
            code="INSUFFICIENT_SHARES",
        )


class StorageError(AppError):
    """A data file cannot be read, parsed or written."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


class UpstreamDataError(AppError):
    """A quote or FX source failed; services absorb it and fall back."""

    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_UNAVAILABLE")
