"""Ownership checks for profile routes, based on the session user and the profile owner."""

from cvchat.errors import AccessDenied, NotFound
from cvchat.services import evidence_store
from cvchat.services.auth import get_session_user


def get_cv_for_access(token):
    """
    Load a profile the caller may read and write.

    Anonymous profiles belong to whoever holds the token. Once a profile is owned
    by an account, only that account gets through (403 for anyone else).
    """
    # session is optional, anonymous profiles work without one
    user = get_session_user()
    cv = evidence_store.get_profile(token)
    if not cv:
        raise NotFound("CV not found")

    if cv.user_id and (not user or user.id != cv.user_id):
        raise AccessDenied("Forbidden")

    return cv, user
