from fastapi import APIRouter, Depends, status

from hr_portal.core.errors import AuthenticationError
from hr_portal.core.security import get_portal
from hr_portal.portal import PortalSession
from hr_portal.schemas.auth import (
    RefreshOut,
    SignInRequest,
    SignUpOut,
    SignUpRequest,
    ViewStateOut,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session", response_model=ViewStateOut)
async def session(portal: PortalSession = Depends(get_portal)):
    """
    Current view state. The first call for a browser session mounts the
    portal (existing session check, user load).
    """
    async with portal.lock:
        state = await portal.bootstrap.settle()
    return ViewStateOut.from_state(state)


@router.post("/sign-up", response_model=SignUpOut, status_code=status.HTTP_201_CREATED)
async def sign_up(payload: SignUpRequest, portal: PortalSession = Depends(get_portal)):
    """
    Create the identity. Portal records (users, employees) are created on the
    first sign-in, so the caller signs in next.
    """
    identity = await portal.auth.sign_up(
        payload.email,
        payload.password,
        payload.first_name,
        payload.last_name,
        payload.role,
    )
    return SignUpOut(subject_id=str(identity.subject_id), email=identity.email)


@router.post("/sign-in", response_model=ViewStateOut)
async def sign_in(payload: SignInRequest, portal: PortalSession = Depends(get_portal)):
    async with portal.lock:
        state = await portal.bootstrap.sign_in(payload.email, payload.password)
    return ViewStateOut.from_state(state)


@router.post("/sign-out", response_model=ViewStateOut)
async def sign_out(portal: PortalSession = Depends(get_portal)):
    async with portal.lock:
        state = await portal.bootstrap.sign_out()
    return ViewStateOut.from_state(state)


@router.post("/refresh", response_model=RefreshOut)
async def refresh(portal: PortalSession = Depends(get_portal)):
    if portal.sessions.current is None:
        raise AuthenticationError("No session to refresh", user_message="You are not signed in.")
    session = await portal.auth.refresh_session()
    return RefreshOut(expires_at=session.expires_at)
