from .admin import AdminQuoteViewSet
from .customer import AcceptQuoteView, MyQuoteDetailView, MyQuoteListCreateView, RejectQuoteView

__all__ = [
    "AdminQuoteViewSet",
    "MyQuoteListCreateView",
    "MyQuoteDetailView",
    "AcceptQuoteView",
    "RejectQuoteView",
]
