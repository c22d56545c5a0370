# users/models/__init__.py

from .address import Address
from .user import User

__all__ = [
    "Address",
    "User",
]
