from typing import AsyncIterator

from fastapi import Depends, HTTPException, Request, Response, status

from hr_portal.container import AppContainer
from hr_portal.portal import PortalSession
from hr_portal.services.auth import CurrentUser


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def get_portal(
    request: Request,
    response: Response,
    container: AppContainer = Depends(get_container),
) -> AsyncIterator[PortalSession]:
    """
    Portal session for the request's cookie. The first request of a browser
    session mounts a new portal and sets the cookie; once the request is
    handled the registry keeps the portal only if it holds a session.
    """
    cookie_name = container.settings.SESSION_COOKIE_NAME
    cookie = request.cookies.get(cookie_name)
    portal = await container.portals.get_or_create(cookie)
    if cookie != portal.session_id:
        response.set_cookie(cookie_name, portal.session_id, httponly=True, samesite="lax")
    try:
        yield portal
    finally:
        await container.portals.release(portal)


def get_current_user(portal: PortalSession = Depends(get_portal)) -> CurrentUser:
    state = portal.state
    if not state.is_authenticated or state.current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return state.current_user
