"""
SilverLine B2B - Custom Exceptions
===================================
Business-level exceptions that can be caught and converted to HTTP responses.

Missing settings and missing rate samples are never exceptions: the resolvers
default them to 0 / None so pricing degrades instead of failing a checkout.
"""


class SilverLineError(Exception):
    """Base exception for all business logic errors."""
    def __init__(self, message: str = "Something went wrong."):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(SilverLineError):
    """Raised when the calling reseller cannot be identified."""
    pass


class AuthorizationError(SilverLineError):
    """Raised when the reseller account may not use the endpoint."""
    pass


class NotFoundError(SilverLineError):
    """Raised when a referenced product, reseller or order doesn't exist."""
    pass


class ValidationError(SilverLineError):
    """Raised for malformed business input (empty cart, unknown status, ...)."""
    pass


class SnapshotImmutableError(SilverLineError):
    """Raised when something tries to modify a frozen order-line snapshot."""
    def __init__(self, field_names=None):
        fields = ", ".join(sorted(field_names or []))
        msg = "Order line snapshot is immutable"
        if fields:
            msg = f"{msg} (attempted change: {fields})"
        super().__init__(msg)


class RateFeedError(SilverLineError):
    """Raised when no live rate feed strategy could produce a rate."""
    pass



class OrderCodeUnavailableError(SilverLineError):
    """Raised when no free order code could be generated for today."""
    pass
