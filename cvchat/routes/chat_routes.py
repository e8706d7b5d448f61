# cvchat/routes/chat_routes.py
from flask import Blueprint, current_app, jsonify, request

from cvchat.errors import ValidationError
from cvchat.services.access import get_cv_for_access
from cvchat.services.answering import answer_question
from cvchat.services.context_assembler import assemble_context_for_cv, assemble_context_for_slug
from cvchat.services.observability import track_event
from cvchat.services.rate_limit import rate_limited

chat_bp = Blueprint("chat", __name__)


def _read_question(body):
    question = body.get("question")
    question = question.strip() if isinstance(question, str) else ""
    max_chars = current_app.config.get("MAX_QUESTION_CHARS", 4000)
    if len(question) > max_chars:
        raise ValidationError(f"Question too long (max {max_chars} chars)")
    return question


def _respond(context, question, location, cv_token=None):
    result = answer_question(context, question)
    if result.is_fallback:
        # the visitor gets the fallback sentence, the failure goes to the event log
        track_event("chat_fallback", cv_token=cv_token, context={"location": location, "error": result.error})
    return jsonify({"answer": result.answer}), 200


@chat_bp.route("/chat", methods=["POST"])
def chat():
    body = request.get_json(silent=True) or {}
    token = body.get("token")
    token = token.strip() if isinstance(token, str) else ""
    question = _read_question(body)

    if not token or not question:
        raise ValidationError("Missing token or question")

    cv, _ = get_cv_for_access(token)
    context = assemble_context_for_cv(cv)
    return _respond(context, question, "api/chat", cv_token=cv.token)


@chat_bp.route("/public-chat", methods=["POST"])
@rate_limited("public-chat", limit=120, window_seconds=60)
def public_chat():
    body = request.get_json(silent=True) or {}
    public_slug = body.get("publicSlug")
    public_slug = public_slug.strip().lower() if isinstance(public_slug, str) else ""
    question = _read_question(body)

    if not public_slug or not question:
        raise ValidationError("Missing publicSlug or question")

    # same data as the public profile page: the slug's most recently updated CV
    context = assemble_context_for_slug(public_slug)
    return _respond(context, question, "api/public-chat")
