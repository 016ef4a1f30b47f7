from fastapi import Depends, HTTPException, status

from hr_portal.core.security import get_current_user, get_portal
from hr_portal.portal import PortalSession
from hr_portal.services.auth import CurrentUser


def require_roles(*required: str):
    """
    Usage:
      Depends(require_roles("hr"))
      Depends(require_roles("hr", "employee"))  # any-of

    Roles are the portal roles from the view state (hr | employee).
    """
    required_set = set(required)

    def _dep(
        portal: PortalSession = Depends(get_portal),
        user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if portal.state.role not in required_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden. Requires one of: {sorted(required_set)}",
            )
        return user

    return _dep
