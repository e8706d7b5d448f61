"""Event tracking into the app_events table plus server error capture."""

from typing import Any, Optional

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import SQLAlchemyError

from cvchat.extensions import db
from cvchat.models import AppEvent
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


def _current_user_id() -> Optional[str]:
    try:
        verify_jwt_in_request(optional=True)
        return get_jwt_identity()
    except (JWTExtendedException, PyJWTError, RuntimeError):
        return None


def track_event(event_type: str, cv_token: Optional[str] = None, context: Any = None) -> None:
    """Store one event. Tracking failures are logged and never break the request."""
    try:
        db.session.add(AppEvent(
            type=event_type,
            cv_token=cv_token,
            user_id=_current_user_id(),
            context=context,
        ))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Could not track event %s: %s", event_type, e)


def capture_server_error(location: str, error: BaseException, cv_token: Optional[str] = None, context: Any = None) -> None:
    logger.error("[%s] %s: %s", location, type(error).__name__, error, exc_info=error)
    payload = {"location": location, "message": str(error)[:500]}
    if context:
        payload["extra"] = context
    track_event("server_error", cv_token=cv_token, context=payload)
