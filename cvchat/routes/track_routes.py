from flask import Blueprint, jsonify, request

from cvchat.errors import ValidationError
from cvchat.services.observability import track_event

track_bp = Blueprint("track", __name__)


@track_bp.route("/track", methods=["POST"])
def track():
    body = request.get_json(silent=True) or {}
    event_type = body.get("type")
    event_type = event_type.strip() if isinstance(event_type, str) else ""
    if not event_type:
        raise ValidationError("Missing type")

    cv_token = body.get("cvToken")
    track_event(
        event_type[:100],
        cv_token=cv_token.strip() if isinstance(cv_token, str) else None,
        context=body.get("context"),
    )
    return jsonify({"ok": True}), 200
