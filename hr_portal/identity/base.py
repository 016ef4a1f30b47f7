import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from hr_portal.identity.channel import AuthEventChannel


@dataclass(frozen=True)
class Identity:
    """The authenticated principal as the identity provider knows it."""
    subject_id: uuid.UUID
    email: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def first_name(self) -> str | None:
        return self.metadata.get("first_name")

    @property
    def last_name(self) -> str | None:
        return self.metadata.get("last_name")

    @property
    def requested_role(self) -> str | None:
        return self.metadata.get("role")


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: datetime
    identity: Identity

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


class AuthEventType(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class AuthEvent:
    type: AuthEventType
    session: AuthSession | None = None


class SessionStore(Protocol):
    """Client-side handle on the identity provider for one portal session."""

    async def get_session(self) -> AuthSession | None:
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Raises AuthenticationError on bad credentials. Emits SIGNED_IN."""
        ...

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> Identity:
        ...

    async def sign_out(self) -> None:
        """Emits SIGNED_OUT."""
        ...

    async def get_current_identity(self) -> Identity | None:
        ...

    async def refresh_session(self) -> AuthSession:
        """Emits TOKEN_REFRESHED."""
        ...

    def subscribe(self) -> AuthEventChannel:
        ...
