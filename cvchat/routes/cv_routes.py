# cvchat/routes/cv_routes.py
from flask import Blueprint, current_app, jsonify, request

from cvchat.errors import NotFound, ValidationError
from cvchat.services import evidence_store, publishing
from cvchat.services.access import get_cv_for_access
from cvchat.services.context_assembler import build_profile_from_cv_data
from cvchat.utils.helpers import isoformat

cv_bp = Blueprint("cv", __name__)


def _load_with_meta(token):
    cv, _ = get_cv_for_access(token)
    if not cv.meta:
        raise NotFound("CV meta not found")
    return cv


@cv_bp.route("/<token>", methods=["GET"])
def get_cv(token):
    cv = _load_with_meta(token)
    meta = cv.meta.to_dict()

    return jsonify({
        "meta": meta,
        "profile": build_profile_from_cv_data(cv.data, meta),
        "publication": publishing.publication_state(cv),
        "status": {
            "updatedAt": isoformat(cv.updated_at),
            "metaUpdatedAt": isoformat(cv.meta.updated_at),
        },
    }), 200


@cv_bp.route("/<token>/meta", methods=["PATCH"])
def update_meta(token):
    body = request.get_json(silent=True) or {}
    summary = body.get("summary")
    if not isinstance(summary, str):
        raise ValidationError("Missing summary")

    summary = summary.strip()
    max_chars = current_app.config.get("MAX_SUMMARY_CHARS", 2000)
    if len(summary) > max_chars:
        raise ValidationError(f"Summary too long (max {max_chars} chars)")

    cv = _load_with_meta(token)
    meta = evidence_store.update_summary(cv, summary)
    return jsonify({**meta.to_dict(), "updatedAt": isoformat(meta.updated_at)}), 200


@cv_bp.route("/<token>/publish", methods=["POST"])
def publish_cv(token):
    cv, _ = get_cv_for_access(token)
    return jsonify(publishing.publish(cv)), 200


@cv_bp.route("/<token>/unpublish", methods=["POST"])
def unpublish_cv(token):
    cv, _ = get_cv_for_access(token)
    return jsonify(publishing.unpublish(cv)), 200


@cv_bp.route("/<token>/share/regenerate", methods=["POST"])
def regenerate_share(token):
    cv, _ = get_cv_for_access(token)
    return jsonify(publishing.regenerate_share_token(cv)), 200
