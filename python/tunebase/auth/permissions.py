"""Authorization guard.

A single decision function is the source of truth for "who may do what":

- evaluate_access() is pure. It never raises and never touches the database,
  so handlers and tests can reason about a decision before acting on it.
- enforce_access() turns a decision into the matching API error.
- require_admin is the FastAPI dependency used by every /api/admin route.

Roles come from the viewer's stored profile only. There is no credential
or email based override.
"""

from enum import Enum
from uuid import UUID

from fastapi import Depends

from tunebase.auth.middleware import Viewer, get_viewer
from tunebase.errors import ApiError, ApiErrorCode


class AccessDecision(Enum):
    """Outcome of an authorization check."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    OK = "ok"


def evaluate_access(
    viewer: Viewer | None,
    *,
    owner_id: UUID | None = None,
    require_admin: bool = False,
    admin_override: bool = True,
) -> AccessDecision:
    """Decide whether viewer may act.

    Args:
        viewer: The authenticated viewer, or None for an anonymous caller.
        owner_id: Owner of the target resource. When given, only the owner
            passes (or an admin, if admin_override).
        require_admin: The action is restricted to admins.
        admin_override: Admins may act on resources they do not own.

    Returns:
        UNAUTHENTICATED when there is no viewer, FORBIDDEN when the viewer
        lacks the required role or ownership, OK otherwise.
    """
    if viewer is None:
        return AccessDecision.UNAUTHENTICATED

    if require_admin and not viewer.is_admin:
        return AccessDecision.FORBIDDEN

    if owner_id is not None and viewer.user_id != owner_id:
        if not (admin_override and viewer.is_admin):
            return AccessDecision.FORBIDDEN

    return AccessDecision.OK


def enforce_access(decision: AccessDecision, message: str = "Forbidden") -> None:
    """Raise the API error matching a negative decision."""
    if decision is AccessDecision.UNAUTHENTICATED:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    if decision is AccessDecision.FORBIDDEN:
        raise ApiError(ApiErrorCode.E_FORBIDDEN, message)


def require_admin(viewer: Viewer = Depends(get_viewer)) -> Viewer:
    """FastAPI dependency: the authenticated viewer, who must be an admin."""
    enforce_access(
        evaluate_access(viewer, require_admin=True),
        "Admin access required",
    )
    return viewer
