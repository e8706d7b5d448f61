"""LLM-based extraction of structured CV and certificate records from extracted PDF text."""

import json
import re
from typing import Optional

from flask import current_app
from pydantic import ValidationError as PydanticValidationError

from cvchat.errors import DependencyFailure, MalformedModelOutput, ParsingUnavailable
from cvchat.schemas.profile import CertificateSchema, CVProfileSchema
from cvchat.services import openai_service
from cvchat.services.prompts import build_certificate_parse_prompt, build_cv_parse_prompt
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

ROLE_CV = "cv"
ROLE_CERTIFICATE = "certificate"

_PROMPTS = {
    ROLE_CV: build_cv_parse_prompt,
    ROLE_CERTIFICATE: build_certificate_parse_prompt,
}
_SCHEMAS = {
    ROLE_CV: CVProfileSchema,
    ROLE_CERTIFICATE: CertificateSchema,
}


def _parse_llm_json(text: str) -> Optional[dict]:
    """Parse a JSON object from the completion, stripping a markdown code fence if present."""
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw)
        raw = re.sub(r"\s*```$", "", raw)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_document(text: str, role: str) -> dict:
    """
    Turn extracted document text into a record of the schema for `role` ("cv" or "certificate").

    The model is trusted only to return a JSON object; its fields are then coerced
    into the full schema shape (missing or wrong-typed values become "" / []).

    Raises:
        ParsingUnavailable: the completion call failed (timeout, non-2xx, empty body).
        MalformedModelOutput: the completion is not a JSON object.
    """
    if role not in _PROMPTS:
        raise ValueError(f"Unknown document role: {role!r}")

    prompt = _PROMPTS[role](text)
    try:
        content = openai_service.complete_chat(
            prompt,
            timeout=current_app.config.get("PARSE_TIMEOUT_SECONDS", 25),
            temperature=0,
        )
    except DependencyFailure as e:
        raise ParsingUnavailable(detail=f"{role} parse failed: {e.detail}") from e

    parsed = _parse_llm_json(content)
    if parsed is None:
        logger.error("Model returned non-JSON %s output: %s", role, content[:300])
        raise MalformedModelOutput(detail=f"{role} output is not a JSON object: {content[:300]}")

    try:
        record = _SCHEMAS[role].model_validate(parsed)
    except PydanticValidationError as e:
        # coercing validators make this unreachable for plain JSON, kept as the last guard
        logger.error("Model %s output failed schema validation: %s", role, e)
        raise MalformedModelOutput(detail=str(e)[:300]) from e

    return record.model_dump()
