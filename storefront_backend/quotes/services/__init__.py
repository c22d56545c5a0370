from .exceptions import (
    AlreadyConvertedError,
    InvalidQuoteStatusError,
    QuoteExpiredError,
    QuoteNotFoundError,
)
from .quote_conversion import convert_quote_to_order
from .quote_lifecycle import (
    accept_quote,
    allowed_quote_transitions,
    reject_quote,
    request_quote,
    send_quote,
    update_quote_items,
)

__all__ = [
    "request_quote",
    "update_quote_items",
    "send_quote",
    "accept_quote",
    "reject_quote",
    "convert_quote_to_order",
    "allowed_quote_transitions",
    "AlreadyConvertedError",
    "InvalidQuoteStatusError",
    "QuoteExpiredError",
    "QuoteNotFoundError",
]
