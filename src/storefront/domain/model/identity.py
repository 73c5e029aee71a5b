"""Shopper identity as reported by the auth provider."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AuthEvent(Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class Session:
    """An authenticated session handed out by the auth provider."""

    user_id: str
    email: str | None = None


@dataclass(frozen=True)
class Identity:
    """Either anonymous (``user_id is None``) or authenticated."""

    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @staticmethod
    def anonymous() -> Identity:
        return Identity()

    @staticmethod
    def authenticated(user_id: str) -> Identity:
        return Identity(user_id)

    @staticmethod
    def from_session(session: Session | None) -> Identity:
        if session is None:
            return Identity()
        return Identity(session.user_id)
