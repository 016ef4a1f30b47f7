import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import sqlalchemy as sa

from hr_portal.db.base import Base


class AuthIdentity(Base):
    """Identity provider account. Not an application table: the portal only reads it through the provider."""
    __tablename__ = "auth_identities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at = mapped_column(DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


class AuthSessionRecord(Base):
    __tablename__ = "auth_sessions"

    access_token: Mapped[str] = mapped_column(String(128), primary_key=True)
    refresh_token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    identity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("auth_identities.id", ondelete="CASCADE"), index=True, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    identity = relationship("AuthIdentity")
