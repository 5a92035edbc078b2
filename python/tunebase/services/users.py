"""User profile service layer.

Profile reads and the admin role change. Roles live only in
user_profiles.role; there is no other source of admin status.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from tunebase.db.models import UserProfile, UserRole
from tunebase.db.session import transaction
from tunebase.errors import ApiErrorCode, ForbiddenError, InvalidRequestError, NotFoundError
from tunebase.schemas.user import UserProfileOut

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in UserRole}


def get_profile(db: Session, user_id: UUID) -> UserProfileOut:
    """Get a user's profile.

    Raises:
        NotFoundError: If no profile exists.
    """
    profile = db.get(UserProfile, user_id)
    if profile is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    return UserProfileOut.model_validate(profile)


def list_users(db: Session) -> list[UserProfileOut]:
    """List all profiles, newest first."""
    profiles = db.scalars(select(UserProfile).order_by(UserProfile.created_at.desc(), UserProfile.id))
    return [UserProfileOut.model_validate(p) for p in profiles]


def change_role(db: Session, actor_id: UUID, target_id: UUID, role: str | None) -> UserProfileOut:
    """Set a user's role.

    Args:
        db: Database session.
        actor_id: The admin making the change (for the audit log line).
        target_id: The profile to update.
        role: "user" or "admin".

    Returns:
        The updated profile.

    Raises:
        InvalidRequestError: Role is not one of user/admin.
        NotFoundError: Target profile does not exist.
        ForbiddenError: The change would leave no admin.
    """
    if role not in VALID_ROLES:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_ROLE, "Role must be 'user' or 'admin'")

    with transaction(db):
        # Admin rows are always locked first and in id order, then the target,
        # so two concurrent demotions queue behind each other
        admin_ids = db.scalars(
            select(UserProfile.id)
            .where(UserProfile.role == UserRole.admin.value)
            .order_by(UserProfile.id)
            .with_for_update()
        ).all()
        profile = db.scalars(
            select(UserProfile).where(UserProfile.id == target_id).with_for_update()
        ).first()
        if profile is None:
            raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")

        demoting = profile.role == UserRole.admin.value and role != UserRole.admin.value
        if demoting and len(admin_ids) <= 1:
            raise ForbiddenError(
                ApiErrorCode.E_LAST_ADMIN_FORBIDDEN, "Cannot demote the last remaining admin"
            )

        previous = profile.role
        profile.role = role

    logger.info("User %s role changed %s -> %s by %s", target_id, previous, role, actor_id)
    return UserProfileOut.model_validate(profile)

