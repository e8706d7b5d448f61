from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from cvchat.errors import AccessDenied, NotFound
from cvchat.extensions import db
from cvchat.services import evidence_store
from cvchat.services.auth import AuthService, current_jti, get_session_user
from cvchat.services.public_slug import ensure_user_public_slug
from cvchat.services.rate_limit import rate_limited
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__)


def _body():
    return request.get_json(silent=True) or {}


def _token_from(body):
    token = body.get("token")
    return token.strip() if isinstance(token, str) else ""


def _user_payload(user, public_slug):
    return {"id": user.id, "email": user.email, "name": user.name, "publicSlug": public_slug}


def _start_session(user, token, hint):
    public_slug = ensure_user_public_slug(user, hint)
    access_token = AuthService.issue_session(user)
    if token:
        # a CV uploaded anonymously before signing in moves into the account
        evidence_store.claim_profile(token, user.id)
    return jsonify({"user": _user_payload(user, public_slug), "accessToken": access_token}), 200


@auth_bp.route("/register", methods=["POST"])
@rate_limited("auth-register", limit=20, window_seconds=60)
def register():
    data = _body()
    user = AuthService.register(data.get("email"), data.get("password"), data.get("name"))
    return _start_session(user, _token_from(data), user.name or user.email.split("@")[0])


@auth_bp.route("/login", methods=["POST"])
@rate_limited("auth-login", limit=60, window_seconds=60)
def login():
    data = _body()
    user = AuthService.authenticate(data.get("email"), data.get("password"))
    return _start_session(user, _token_from(data), user.name or user.email.split("@")[0])


@auth_bp.route("/logout", methods=["POST"])
def logout():
    jti = current_jti()
    if jti:
        AuthService.revoke_session(jti)
    return jsonify({"ok": True}), 200


@auth_bp.route("/me", methods=["GET"])
def me():
    user = get_session_user()
    if not user:
        return jsonify({"user": None}), 200

    public_slug = ensure_user_public_slug(user, user.name or user.email.split("@")[0])
    payload = _user_payload(user, public_slug)
    payload["cvToken"] = evidence_store.latest_token_for_user(user.id)
    return jsonify({"user": payload}), 200


@auth_bp.route("/delete", methods=["POST"])
@jwt_required()
def delete_account():
    user = get_session_user()
    if not user:
        return jsonify({"error": "Unauthorized"}), 401

    token = _token_from(_body())
    if token:
        cv = evidence_store.get_profile(token)
        if not cv:
            raise NotFound("CV not found")
        if cv.user_id != user.id:
            raise AccessDenied("Forbidden")

    logger.info("Deleting account %s", user.id)
    # cascades to profiles, their evidence, and sessions
    db.session.delete(user)
    db.session.commit()
    return jsonify({"ok": True}), 200
