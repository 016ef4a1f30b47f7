from datetime import datetime

from pydantic import BaseModel, Field

from hr_portal.core.errors import Notice
from hr_portal.services.auth import CurrentUser
from hr_portal.services.bootstrap import ViewState


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: str | None = None  # ADMIN or EMPLOYEE; anything else becomes EMPLOYEE


class SignUpOut(BaseModel):
    subject_id: str
    email: str


class SignInRequest(BaseModel):
    email: str
    password: str


class NoticeOut(BaseModel):
    level: str
    message: str
    error_id: str | None = None

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeOut":
        return cls(level=notice.level, message=notice.message, error_id=notice.error_id)


class CurrentUserOut(BaseModel):
    user_id: str
    email: str
    role: str
    is_active: bool
    last_login: datetime | None = None
    is_fallback: bool = False

    @classmethod
    def from_user(cls, user: CurrentUser) -> "CurrentUserOut":
        return cls(
            user_id=str(user.user_id),
            email=user.email,
            role=user.role,
            is_active=user.is_active,
            last_login=user.last_login,
            is_fallback=user.is_fallback,
        )


class ViewStateOut(BaseModel):
    """What the browser renders from: login screen, spinner or dashboard."""
    phase: str
    is_authenticated: bool
    is_loading: bool
    role: str
    current_user: CurrentUserOut | None = None
    notice: NoticeOut | None = None

    @classmethod
    def from_state(cls, state: ViewState) -> "ViewStateOut":
        return cls(
            phase=state.phase.value,
            is_authenticated=state.is_authenticated,
            is_loading=state.is_loading,
            role=state.role,
            current_user=CurrentUserOut.from_user(state.current_user) if state.current_user else None,
            notice=NoticeOut.from_notice(state.notice) if state.notice else None,
        )


class RefreshOut(BaseModel):
    expires_at: datetime
