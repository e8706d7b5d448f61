"""
Builds the single, stable-shaped context object the answering engine and the
profile endpoints read from.

Stored records come from model output and may predate the current schema, so
every field is coerced here: unexpected types collapse to "" or [] rather than
leaking through.
"""

from typing import Optional

from cvchat.errors import NotFound
from cvchat.models import CV
from cvchat.services import evidence_store
from cvchat.utils.helpers import as_dict, as_list, as_loose_items, as_str, as_str_list


def _normalize_experience(item) -> dict:
    row = as_dict(item)
    return {
        "organization": as_str(row.get("organization")),
        "role": as_str(row.get("role")),
        "start": as_str(row.get("start")),
        "end": as_str(row.get("end")),
        "responsibilities": as_str_list(row.get("tasks")),
        "keywords": as_str_list(row.get("keywords")),
    }


def _normalize_project(item) -> dict:
    row = as_dict(item)
    return {
        "name": as_str(row.get("name")),
        "role": as_str(row.get("role")),
        "summary": as_str(row.get("summary")),
        "impact": as_str(row.get("impact")),
        "tech": as_str_list(row.get("tech")),
        "links": as_str_list(row.get("links")),
    }


def normalize_certificate(item) -> dict:
    row = as_dict(item)
    return {
        "title": as_str(row.get("title")),
        "issuer": as_str(row.get("issuer")),
        "date": as_str(row.get("date")),
    }


def normalize_meta(meta) -> dict:
    meta = as_dict(meta)
    image_url = meta.get("imageUrl")
    return {
        "name": as_str(meta.get("name")),
        "position": as_str(meta.get("position")),
        "summary": as_str(meta.get("summary")),
        "imageUrl": image_url if isinstance(image_url, str) else None,
    }


def build_profile_from_cv_data(cv_data, meta: Optional[dict] = None) -> dict:
    """Normalize stored CV JSON; empty person fields fall back to the meta projection."""
    cv = as_dict(cv_data)
    person = as_dict(cv.get("person"))
    meta = normalize_meta(meta)

    return {
        "person": {
            "name": as_str(person.get("name")) or meta["name"],
            "title": as_str(person.get("title")) or meta["position"],
            "location": as_str(person.get("location")),
            "summary": as_str(person.get("summary")) or meta["summary"],
        },
        "skills": as_str_list(cv.get("skills")),
        "experience": [_normalize_experience(item) for item in as_list(cv.get("experience"))],
        "projects": [_normalize_project(item) for item in as_list(cv.get("projects"))],
        "education": as_loose_items(cv.get("education")),
        "languages": as_loose_items(cv.get("languages")),
    }


def build_snapshot(cv: CV) -> dict:
    """Point-in-time copy of a profile and its evidence, as stored when publishing."""
    evidence = evidence_store.load_evidence(cv)
    return {
        "cv": cv.data,
        "meta": cv.meta.to_dict() if cv.meta else normalize_meta(None),
        "certificates": evidence["certificates"],
        "references": evidence["references"],
        "additionalText": evidence["additionalText"],
    }


def build_public_profile(snapshot) -> dict:
    snapshot = as_dict(snapshot)
    meta = normalize_meta(snapshot.get("meta"))
    profile = build_profile_from_cv_data(snapshot.get("cv"), meta)
    profile["certificates"] = [normalize_certificate(item) for item in as_list(snapshot.get("certificates"))]
    return {
        "meta": meta,
        "profile": profile,
        "sources": {
            "references": as_str_list(snapshot.get("references")),
            "additionalText": as_str_list(snapshot.get("additionalText")),
        },
    }


def build_structured_chat_context(snapshot) -> dict:
    public = build_public_profile(snapshot)
    profile = public["profile"]
    return {
        "candidate": profile["person"],
        "skills": profile["skills"],
        "experience": profile["experience"],
        "projects": profile["projects"],
        "education": profile["education"],
        "languages": profile["languages"],
        "certificates": profile["certificates"],
        "additionalEvidence": public["sources"],
    }


def assemble_context_for_cv(cv: CV) -> dict:
    """Private path: live evidence of one profile token."""
    return build_structured_chat_context(build_snapshot(cv))


def assemble_context_for_slug(public_slug: str) -> dict:
    """Public path: live evidence of the latest profile behind a public slug."""
    cv = evidence_store.latest_profile_for_slug(public_slug)
    if not cv or not cv.meta:
        raise NotFound("CV not found")
    return assemble_context_for_cv(cv)
