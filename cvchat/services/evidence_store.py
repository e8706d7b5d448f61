"""Persistence of profiles and their evidence, always scoped by profile token."""

import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from cvchat.extensions import db
from cvchat.models import AdditionalText, CV, CVMeta, Certificate, ReferenceDocument, User
from cvchat.utils.helpers import as_dict, as_str
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

PROJECT_PLACEHOLDER_MARKER = "[PROJECT PLACEHOLDER]"


def compose_additional_text(additional_text: Optional[str], project_placeholder: Optional[str]) -> Optional[str]:
    """Merge free text and placeholder project text into one evidence entry, or None if both are blank."""
    parts = []
    if additional_text and additional_text.strip():
        parts.append(additional_text.strip())
    if project_placeholder and project_placeholder.strip():
        parts.append(f"{PROJECT_PLACEHOLDER_MARKER}\n{project_placeholder.strip()}")
    return "\n\n".join(parts) or None


def create_profile(
    cv_data: dict,
    image_url: Optional[str] = None,
    user_id: Optional[str] = None,
    certificates: Iterable[Tuple[dict, str]] = (),
    references: Iterable[str] = (),
    additional_text: Optional[str] = None,
    token: Optional[str] = None,
) -> CV:
    """
    Persist a parsed CV with its meta projection and all evidence in a single commit.

    certificates is a sequence of (parsed_data, raw_text) pairs. The meta projection
    is derived from the same parse result, so a profile never exists without it.
    """
    person = as_dict(cv_data.get("person"))
    token = token or str(uuid.uuid4())

    cv = CV(token=token, user_id=user_id, data=cv_data)
    cv.meta = CVMeta(
        cv_token=token,
        name=as_str(person.get("name")),
        position=as_str(person.get("title")),
        summary=as_str(person.get("summary")),
        image_url=image_url,
    )
    for parsed_cert, raw_text in certificates:
        cv.certificates.append(Certificate(cv_token=token, data=parsed_cert, raw_text=raw_text))
    for raw_text in references:
        cv.references.append(ReferenceDocument(cv_token=token, raw_text=raw_text))
    if additional_text:
        cv.additional_texts.append(AdditionalText(cv_token=token, content=additional_text))

    try:
        db.session.add(cv)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Database error while creating profile %s", token)
        raise

    logger.info(
        "Profile %s created (%d certificates, %d references, additional text: %s)",
        token, len(cv.certificates), len(cv.references), bool(additional_text),
    )
    return cv


def get_profile(token: str) -> Optional[CV]:
    return CV.query.filter_by(token=token).first()


def list_certificates(token: str) -> List[dict]:
    rows = Certificate.query.filter_by(cv_token=token).order_by(Certificate.created_at).all()
    return [row.data for row in rows]


def list_reference_texts(token: str) -> List[str]:
    rows = ReferenceDocument.query.filter_by(cv_token=token).order_by(ReferenceDocument.created_at).all()
    return [row.raw_text for row in rows]


def list_additional_texts(token: str) -> List[str]:
    rows = AdditionalText.query.filter_by(cv_token=token).order_by(AdditionalText.created_at).all()
    return [row.content for row in rows]


def load_evidence(cv: CV) -> dict:
    """Current evidence rows of one profile, read fresh from the store."""
    return {
        "certificates": list_certificates(cv.token),
        "references": list_reference_texts(cv.token),
        "additionalText": list_additional_texts(cv.token),
    }


def latest_profile_for_slug(public_slug: str) -> Optional[CV]:
    """
    Resolve a public slug to the owner's most recently updated profile.
    One slug exposes exactly one profile: the latest.
    """
    slug = (public_slug or "").strip().lower()
    if not slug:
        return None
    user = User.query.filter_by(public_slug=slug).first()
    if not user:
        return None
    return CV.query.filter_by(user_id=user.id).order_by(CV.updated_at.desc()).first()


def update_summary(cv: CV, summary: str) -> CVMeta:
    cv.meta.summary = summary
    db.session.commit()
    return cv.meta


def claim_profile(token: str, user_id: str) -> int:
    """Attach an anonymous profile to a user; profiles owned by someone else are left alone."""
    claimed = (
        CV.query.filter(CV.token == token, or_(CV.user_id.is_(None), CV.user_id == user_id))
        .update({CV.user_id: user_id}, synchronize_session="fetch")
    )
    db.session.commit()
    return claimed


def latest_token_for_user(user_id: str) -> Optional[str]:
    cv = CV.query.filter_by(user_id=user_id).order_by(CV.created_at.desc()).first()
    return cv.token if cv else None
