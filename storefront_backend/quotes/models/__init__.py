# quotes/models/__init__.py

from .quote import Quote
from .quote_item import QuoteItem

__all__ = [
    "Quote",
    "QuoteItem",
]
