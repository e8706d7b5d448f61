"""Grounded question answering over an assembled evidence context."""

import enum
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from cvchat.errors import DependencyFailure
from cvchat.services import openai_service
from cvchat.services.prompts import FALLBACK_SENTENCE, REFUSAL_SENTENCE, build_chat_prompt
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


class AnswerState(enum.Enum):
    """
    Recorded outcome of one request. A request always builds the context, composes
    the prompt and calls the model, in that order; only the final state is kept.
    """
    ANSWERED_FROM_MODEL = "answered_from_model"
    FALLBACK_ANSWER = "fallback_answer"


@dataclass
class ChatAnswer:
    answer: str
    state: AnswerState
    error: Optional[str] = None

    @property
    def is_fallback(self):
        return self.state is AnswerState.FALLBACK_ANSWER


def _normalize_refusal(content: str) -> str:
    """A reply that carries the refusal sentence is the refusal, nothing more."""
    if REFUSAL_SENTENCE.lower() in content.lower():
        return REFUSAL_SENTENCE
    return content.strip()


def answer_question(context: dict, question: str) -> ChatAnswer:
    """
    Answer `question` strictly from `context` with one completion call.

    Never raises for completion failures: those return FALLBACK_SENTENCE with the
    error kept on the result for logging and tracking.
    """
    prompt = build_chat_prompt(context if isinstance(context, dict) else {})

    try:
        content = openai_service.complete_chat(
            prompt,
            question=question,
            timeout=current_app.config.get("CHAT_TIMEOUT_SECONDS", 20),
            temperature=0,
        )
    except DependencyFailure as e:
        logger.warning("Chat completion failed, answering with fallback: %s", e.detail)
        return ChatAnswer(answer=FALLBACK_SENTENCE, state=AnswerState.FALLBACK_ANSWER, error=e.detail or e.message)

    return ChatAnswer(answer=_normalize_refusal(content), state=AnswerState.ANSWERED_FROM_MODEL)
