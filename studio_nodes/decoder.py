"""
Response decoder: raw model text -> typed result.

Gemini sometimes wraps JSON in ```json ... ``` even in JSON mode, so fences
are stripped before parsing. Any failure raises MalformedResponseError with
the raw text attached; nothing is swallowed here.
"""
import json
import re
from typing import Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from studio_shared.errors import MalformedResponseError

from .shapes import Shape, structural_problems

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")


def strip_code_fences(raw_text: str) -> str:
    """Remove a surrounding fenced-code block, if any. Idempotent."""
    text = raw_text.strip()
    if text.startswith("```"):
        text = _LEADING_FENCE.sub("", text, count=1)
        text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def decode(raw_text: str, shape: Shape, response_model: Type[T]) -> T:
    """
    Parse `raw_text` as JSON, check it against `shape`, and build `response_model`.

    Raises:
        MalformedResponseError: not JSON, missing/mistyped fields, or the
            model class rejects the payload
    """
    cleaned = strip_code_fences(raw_text or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("llm_json_parse_failed", error=str(e), response_preview=cleaned[:200] or "EMPTY")
        raise MalformedResponseError(
            f"AI response is not valid JSON: {e}",
            raw_text=raw_text,
            problems=[str(e)],
        ) from e

    problems = structural_problems(data, shape)
    if problems:
        logger.error("llm_shape_mismatch", problems=problems[:10], response_preview=cleaned[:200])
        raise MalformedResponseError(
            f"AI response does not match the expected structure: {'; '.join(problems[:5])}",
            raw_text=raw_text,
            problems=problems,
        )

    try:
        return response_model.model_validate(data)
    except ValidationError as e:
        logger.error("llm_validation_failed", model=response_model.__name__, error=str(e)[:500])
        raise MalformedResponseError(
            f"AI response validation failed for {response_model.__name__}: {e}",
            raw_text=raw_text,
            problems=[err["msg"] for err in e.errors()],
        ) from e
