"""User profile bootstrap service.

Provides race-safe profile creation on first authenticated request.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tunebase.db.models import UserProfile, UserRole

logger = logging.getLogger(__name__)


def ensure_user_profile(db: Session, user_id: UUID, display_name: str | None = None) -> str:
    """Ensure a profile row exists for user_id and return its stored role.

    New profiles always start with the "user" role; promotion to admin only
    happens through the admin role-change operation.

    This function is race-safe and idempotent: if two first requests from
    the same user race, the loser's insert fails on the primary key and it
    re-reads the winner's row.

    Args:
        db: Database session.
        user_id: The user's ID (from JWT sub claim).
        display_name: Optional display name recorded on creation only.

    Returns:
        The profile's role ("user" or "admin").
    """
    profile = db.get(UserProfile, user_id)
    if profile is not None:
        return profile.role

    db.add(UserProfile(id=user_id, role=UserRole.user.value, display_name=display_name))
    try:
        db.commit()
    except IntegrityError:
        # Lost race: another request created it
        db.rollback()
        profile = db.get(UserProfile, user_id)
        if profile is None:
            raise
        return profile.role

    logger.info("Created user profile %s", user_id)
    return UserRole.user.value
