# quotes/services/exceptions.py

from backend.errors import CommerceError, NotFoundError


class QuoteNotFoundError(NotFoundError):
    """Quote does not exist."""

    code = "QUOTE_NOT_FOUND"


class InvalidQuoteStatusError(CommerceError):
    """Operation not allowed for the quote's current status."""

    code = "INVALID_QUOTE_STATUS"


class AlreadyConvertedError(CommerceError):
    """Quote has already been converted into an order."""

    code = "ALREADY_CONVERTED"


class QuoteExpiredError(CommerceError):
    """Quote validity date has passed."""

    code = "QUOTE_EXPIRED"
