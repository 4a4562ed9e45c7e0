"""Business errors raised by marketplace command handlers and queries.

Each error carries the HTTP status and machine-readable code it is reported
with; the human-readable message is the exception text.
"""


class MarketplaceError(Exception):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketplaceError):
    status_code = 404
    code = "NOT_FOUND"


class ForbiddenError(MarketplaceError):
    status_code = 403
    code = "FORBIDDEN"


class AuthenticationError(MarketplaceError):
    status_code = 401
    code = "UNAUTHORIZED"


class InvalidStateError(MarketplaceError):
    """A business rule rejects the operation in the current state."""

    code = "INVALID_STATE"


class InsufficientStockError(InvalidStateError):
    code = "INSUFFICIENT_STOCK"


class InvalidTransitionError(InvalidStateError):
    code = "INVALID_TRANSITION"
