# filename: openai_service.py
# location: cvchat/services/

from typing import Optional

from flask import current_app
from openai import OpenAI, OpenAIError

from cvchat.errors import DependencyFailure
from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


def get_client(timeout: float) -> OpenAI:
    """
    Build a client for the configured API key.
    Retries are disabled: one failed call fails the operation.
    """
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        raise DependencyFailure(detail="OPENAI_API_KEY is not set")
    return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def complete_chat(prompt: str, question: Optional[str] = None, timeout: float = 20, temperature: float = 0) -> str:
    """
    Send a single-turn chat completion and return the message text.

    Args:
        prompt (str): System instruction (includes the document or evidence).
        question (str): Optional user message sent after the instruction.
        timeout (float): Seconds before the request is aborted.
        temperature (float): Sampling temperature, 0 for deterministic output.

    Raises:
        DependencyFailure: on timeout, network error, non-2xx status, or empty content.
    """
    client = get_client(timeout)

    messages = [{"role": "system", "content": prompt}]
    if question:
        messages.append({"role": "user", "content": question})

    try:
        completion = client.chat.completions.create(
            model=current_app.config.get("OPENAI_MODEL", "gpt-4o-mini"),
            messages=messages,
            temperature=temperature,
        )
    except OpenAIError as e:
        logger.warning("OpenAI request failed: %s", str(e)[:300])
        raise DependencyFailure(detail=f"OpenAI error: {str(e)[:300]}") from e

    choice = completion.choices[0] if completion.choices else None
    content = choice.message.content if choice and choice.message else None
    if not isinstance(content, str) or not content.strip():
        logger.warning("OpenAI returned no content")
        raise DependencyFailure(detail="OpenAI returned no content")

    return content
