from .addresses import AddressDetailView, AddressListCreateView
from .me import MeView
from .register import RegisterView

__all__ = [
    "RegisterView",
    "MeView",
    "AddressListCreateView",
    "AddressDetailView",
]
