# cart/services/owners.py

"""
Cart owner: a signed-in user OR an anonymous browser session, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UserOwner:
    user_id: object

    def as_filter(self) -> dict:
        return {"user_id": self.user_id, "session_key__isnull": True}

    def as_fields(self) -> dict:
        return {"user_id": self.user_id, "session_key": None}


@dataclass(frozen=True)
class AnonymousOwner:
    session_key: str

    def as_filter(self) -> dict:
        return {"session_key": self.session_key, "user__isnull": True}

    def as_fields(self) -> dict:
        return {"user": None, "session_key": self.session_key}


Owner = Union[UserOwner, AnonymousOwner]


def owner_from_request(request, *, create_session: bool = True) -> Owner | None:
    """
    Resolve the cart owner for a request.

    Anonymous visitors are keyed by their Django session; a session is
    created on first write when create_session is set.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return UserOwner(user_id=user.pk)

    session = getattr(request, "session", None)
    if session is None:
        return None

    if not session.session_key:
        if not create_session:
            return None
        session.save()

    return AnonymousOwner(session_key=session.session_key)
