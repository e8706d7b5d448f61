# cvchat/routes/public_routes.py
from flask import Blueprint, current_app, jsonify, send_from_directory

from cvchat.errors import NotFound
from cvchat.services import evidence_store, publishing
from cvchat.services.context_assembler import build_profile_from_cv_data, build_public_profile
from cvchat.utils.helpers import isoformat

public_bp = Blueprint("public", __name__)


@public_bp.route("/public-cv/<share_token>", methods=["GET"])
def get_shared_cv(share_token):
    # unpublished, unshared and unknown links all look the same from outside
    cv = publishing.get_shared_cv(share_token)
    if not cv:
        raise NotFound("Not found")

    public = build_public_profile(cv.published_data)
    return jsonify({
        "meta": public["meta"],
        "profile": public["profile"],
        "publishedAt": isoformat(cv.published_at),
        "updatedAt": isoformat(cv.updated_at),
    }), 200


@public_bp.route("/public-profile/<public_slug>", methods=["GET"])
def get_public_profile(public_slug):
    cv = evidence_store.latest_profile_for_slug(public_slug)
    if not cv or not cv.meta:
        raise NotFound("Not found")

    meta = cv.meta.to_dict()
    return jsonify({
        "publicSlug": cv.user.public_slug,
        "updatedAt": isoformat(cv.updated_at),
        "meta": meta,
        "profile": build_profile_from_cv_data(cv.data, meta),
    }), 200


@public_bp.route("/media/<token>/<filename>", methods=["GET"])
def media(token, filename):
    # safe_join inside send_from_directory rejects paths escaping the upload folder
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], f"{token}/{filename}")
