import re
import uuid

from sqlalchemy.exc import IntegrityError

from cvchat.extensions import db
from cvchat.models import User
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

MAX_ATTEMPTS = 30


def slugify(value):
    """Keep only URL-friendly characters."""
    cleaned = re.sub(r"[^a-z0-9]+", "-", (value or "").lower().strip()).strip("-")
    return cleaned or "profile"


def ensure_user_public_slug(user, hint=None):
    """
    Return the user's public slug, assigning one on first use.
    Once assigned a slug never changes; collisions get a short random suffix.
    """
    if user.public_slug:
        return user.public_slug

    base_hint = (hint or "").strip() or user.name or user.email.split("@")[0] or "profile"
    base = slugify(base_hint)[:42]

    for attempt in range(MAX_ATTEMPTS):
        suffix = "" if attempt == 0 else f"-{uuid.uuid4().hex[:4]}"
        candidate = f"{base}{suffix}"[:50]
        if User.query.filter_by(public_slug=candidate).first():
            continue
        user.public_slug = candidate
        try:
            db.session.commit()
            return candidate
        except IntegrityError:
            # lost a race for this slug, try the next candidate
            db.session.rollback()

    logger.error("Could not assign a public slug to user %s", user.id)
    return None
