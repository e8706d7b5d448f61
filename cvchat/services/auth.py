# cvchat/services/auth.py
from datetime import datetime, timedelta

from flask import current_app, jsonify
from flask_jwt_extended import create_access_token, get_jti, get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError

from cvchat.errors import Conflict, Unauthorized, ValidationError
from cvchat.extensions import db, bcrypt
from cvchat.models import User, UserSession
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def normalize_email(email):
    return (email or "").strip().lower()


class AuthService:
    @staticmethod
    def register(email, password, name=None):
        """Create a new user. Emails are unique case-insensitively."""
        email = normalize_email(email)
        password = (password or "").strip()
        logger.info("Register attempt: %s", email)

        if (
            not email or "@" not in email
            or len(password) < MIN_PASSWORD_LENGTH
            or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES
        ):
            raise ValidationError("Invalid email or password (min 6 chars)")

        if User.query.filter_by(email=email).first():
            raise Conflict("Email already registered")

        user = User(
            name=(name or "").strip() or None,
            email=email,
            password=bcrypt.generate_password_hash(password).decode("utf-8"),
        )
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict("Email already registered") from e

        logger.info("Registration successful for %s", email)
        return user

    @staticmethod
    def authenticate(email, password):
        """Return the user for valid credentials, else raise Unauthorized."""
        email = normalize_email(email)
        password = (password or "").strip()
        if not email or not password:
            raise ValidationError("Missing email or password")

        user = User.query.filter_by(email=email).first()
        if not user or not bcrypt.check_password_hash(user.password, password):
            logger.info("Invalid credentials for %s", email)
            raise Unauthorized("Invalid credentials")
        return user

    @staticmethod
    def issue_session(user):
        """Create a JWT and the server-side session row that keeps it valid."""
        expires_delta = timedelta(days=current_app.config.get("SESSION_TTL_DAYS", 30))
        access_token = create_access_token(
            identity=str(user.id),
            additional_claims={"email": user.email},
            expires_delta=expires_delta,
        )
        db.session.add(UserSession(
            jti=get_jti(access_token),
            user_id=user.id,
            expires_at=datetime.utcnow() + expires_delta,
        ))
        db.session.commit()
        return access_token

    @staticmethod
    def revoke_session(jti):
        UserSession.query.filter_by(jti=jti).delete()
        db.session.commit()

    @staticmethod
    def is_session_active(jti):
        session = UserSession.query.filter_by(jti=jti).first()
        if not session:
            return False
        if session.expires_at < datetime.utcnow():
            # expired sessions are cleaned up when they are seen
            db.session.delete(session)
            db.session.commit()
            return False
        return True


def _verify_optional_jwt():
    """True when the request carries a live session token. Stale or broken tokens count as anonymous."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as e:
        logger.info("Ignoring unusable session token: %s", e)
        return False
    return True


def get_session_user():
    """The authenticated user of this request, or None for anonymous callers."""
    if not _verify_optional_jwt():
        return None
    identity = get_jwt_identity()
    if not identity:
        return None
    return db.session.get(User, identity)


def current_jti():
    if not _verify_optional_jwt():
        return None
    return get_jwt().get("jti")


def register_jwt_callbacks(jwt):
    @jwt.token_in_blocklist_loader
    def check_if_session_revoked(jwt_header, jwt_payload):
        return not AuthService.is_session_active(jwt_payload["jti"])

    @jwt.revoked_token_loader
    def revoked_token_response(jwt_header, jwt_payload):
        return jsonify({"error": "Session expired"}), 401

    @jwt.expired_token_loader
    def expired_token_response(jwt_header, jwt_payload):
        return jsonify({"error": "Session expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_response(reason):
        return jsonify({"error": "Invalid session token"}), 401

    @jwt.unauthorized_loader
    def missing_token_response(reason):
        return jsonify({"error": "Unauthorized"}), 401
