"""Publishing a frozen snapshot of a profile and managing its share link."""

import secrets
from datetime import datetime
from typing import Optional

from cvchat.extensions import db
from cvchat.models import CV
from cvchat.services.context_assembler import build_snapshot
from cvchat.utils.helpers import isoformat
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


def create_share_token() -> str:
    """Opaque URL-safe token; rotating it invalidates every earlier share link."""
    return secrets.token_urlsafe(18)


def publication_state(cv: CV) -> dict:
    return {
        "isPublished": bool(cv.is_published),
        "shareEnabled": bool(cv.share_enabled),
        "shareToken": cv.share_token,
        "publishedAt": isoformat(cv.published_at),
    }


def publish(cv: CV) -> dict:
    """Freeze the current profile and evidence; later live edits do not reach recruiters."""
    cv.published_data = build_snapshot(cv)
    cv.published_at = datetime.utcnow()
    cv.is_published = True
    db.session.commit()
    logger.info("Profile %s published", cv.token)
    return publication_state(cv)


def unpublish(cv: CV) -> dict:
    """Revoke the public link. The last snapshot and its timestamp are kept."""
    cv.is_published = False
    cv.share_enabled = False
    db.session.commit()
    return publication_state(cv)


def regenerate_share_token(cv: CV) -> dict:
    cv.share_token = create_share_token()
    cv.share_enabled = True
    db.session.commit()
    logger.info("Share token rotated for profile %s", cv.token)
    return publication_state(cv)


def get_shared_cv(share_token: str) -> Optional[CV]:
    """The profile behind a share link, only while it is published, shared and has a snapshot."""
    if not share_token:
        return None
    cv = CV.query.filter_by(share_token=share_token).first()
    if not cv or not cv.is_published or not cv.share_enabled or not cv.published_data:
        return None
    return cv
