"""Play history service layer.

Recording a play is best effort: the caller is already listening, so a
failed insert is logged and never reported back.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tunebase.db.models import PlayHistory
from tunebase.db.session import transaction

logger = logging.getLogger(__name__)


def record_play(db: Session, viewer_id: UUID, song_id: UUID) -> bool:
    """Append a play-history row.

    Returns:
        True if the row was written, False if the insert failed (for
        example because the song does not exist).
    """
    try:
        with transaction(db):
            db.add(PlayHistory(user_id=viewer_id, song_id=song_id))
    except SQLAlchemyError as e:
        logger.warning("Play history insert failed for user %s song %s: %s", viewer_id, song_id, e)
        return False
    return True
