from .quote import (
    QuoteItemSerializer,
    QuoteItemsUpdateInputSerializer,
    QuoteRequestInputSerializer,
    QuoteSerializer,
    SendQuoteInputSerializer,
)

__all__ = [
    "QuoteSerializer",
    "QuoteItemSerializer",
    "QuoteRequestInputSerializer",
    "QuoteItemsUpdateInputSerializer",
    "SendQuoteInputSerializer",
]
