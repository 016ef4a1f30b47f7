"""
Identity provider.

Owns accounts (email + Argon2 password hash + sign-up metadata) and the
sessions it issues. The portal never touches these tables directly; it talks
to the provider through a SessionStore.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, TypeVar

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, VerifyMismatchError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hr_portal.core.errors import AuthenticationError, TransientStoreError
from hr_portal.core.logger import get_logger
from hr_portal.identity.base import AuthSession, Identity
from hr_portal.models.identity import AuthIdentity, AuthSessionRecord

logger = get_logger(__name__)

T = TypeVar("T")

MIN_PASSWORD_LENGTH = 6


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_identity(row: AuthIdentity) -> Identity:
    return Identity(subject_id=row.id, email=row.email, metadata=dict(row.user_metadata or {}))


class IdentityProvider:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        access_token_ttl: int = 3600,
        hasher: PasswordHasher | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session_factory = session_factory
        self._ttl = timedelta(seconds=access_token_ttl)
        self._hasher = hasher or PasswordHasher()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _run(self, table: str, operation: str, work: Callable[[Session], T]) -> T:
        with self._session_factory() as db:
            try:
                return work(db)
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error(
                    "Identity provider %s failed",
                    operation,
                    exc_info=True,
                    extra={"table": table, "operation": operation},
                )
                raise TransientStoreError(table, operation, exc.__class__.__name__) from exc

    def _issue(self, db: Session, row: AuthIdentity) -> AuthSession:
        record = AuthSessionRecord(
            access_token=secrets.token_urlsafe(32),
            refresh_token=secrets.token_urlsafe(32),
            identity_id=row.id,
            expires_at=self._clock() + self._ttl,
        )
        db.add(record)
        db.commit()
        return AuthSession(
            access_token=record.access_token,
            refresh_token=record.refresh_token,
            expires_at=_utc(record.expires_at),
            identity=_to_identity(row),
        )

    def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> Identity:
        """Create an account. No session is issued; the user signs in afterwards."""
        normalized = _normalize_email(email)
        if "@" not in normalized:
            raise AuthenticationError("Invalid email", user_message="Please enter a valid email address.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(
                "Password too short",
                user_message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            )

        def work(db: Session) -> Identity:
            row = AuthIdentity(
                email=normalized,
                password_hash=self._hasher.hash(password),
                user_metadata=dict(metadata or {}),
            )
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise AuthenticationError(
                    "Email already registered",
                    user_message="An account with this email already exists.",
                    context={"email": normalized},
                ) from None
            return _to_identity(row)

        identity = self._run("auth_identities", "sign_up", work)
        logger.info("Identity created", extra={"subject_id": str(identity.subject_id)})
        return identity

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        normalized = _normalize_email(email)

        def work(db: Session) -> AuthSession:
            row = db.execute(select(AuthIdentity).where(AuthIdentity.email == normalized)).scalar_one_or_none()
            if row is None or not self._verify(password, row.password_hash):
                logger.warning("Sign-in rejected", extra={"email": normalized})
                raise AuthenticationError("Invalid credentials", context={"email": normalized})
            return self._issue(db, row)

        return self._run("auth_sessions", "sign_in", work)

    def _verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerifyMismatchError, VerificationError):
            return False

    def _live_record(self, db: Session, **criteria) -> AuthSessionRecord | None:
        stmt = select(AuthSessionRecord)
        for key, value in criteria.items():
            stmt = stmt.where(getattr(AuthSessionRecord, key) == value)
        record = db.execute(stmt).scalar_one_or_none()
        if record is None or record.revoked_at is not None:
            return None
        return record

    def get_identity(self, access_token: str) -> Identity | None:
        """Identity behind a live access token, or None when revoked, expired or unknown."""

        def work(db: Session) -> Identity | None:
            record = self._live_record(db, access_token=access_token)
            if record is None or _utc(record.expires_at) <= self._clock():
                return None
            return _to_identity(record.identity)

        return self._run("auth_sessions", "get_identity", work)

    def refresh(self, refresh_token: str) -> AuthSession:
        """Rotate a session: the old tokens are revoked and a new pair is issued."""

        def work(db: Session) -> AuthSession:
            record = self._live_record(db, refresh_token=refresh_token)
            if record is None:
                raise AuthenticationError("Invalid refresh token", user_message="Your session has expired.")
            record.revoked_at = self._clock()
            return self._issue(db, record.identity)

        return self._run("auth_sessions", "refresh", work)

    def revoke(self, access_token: str) -> None:
        def work(db: Session) -> None:
            record = self._live_record(db, access_token=access_token)
            if record is not None:
                record.revoked_at = self._clock()
                db.commit()

        self._run("auth_sessions", "revoke", work)
