"""Turn raw model text into a validated AnalysisResult.

Steps: strip markdown code fences, trim, parse JSON, validate the schema.
Nothing is coerced or filled in; any deviation is a FormatError.
"""

import json
import logging
import re

from pydantic import ValidationError

from models.responses import AnalysisResult
from services.errors import FormatError

logger = logging.getLogger(__name__)

_OPENING_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE_RE = re.compile(r"\n?[ \t]*```$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker.

    Unfenced text comes back trimmed but otherwise untouched.
    """
    cleaned = text.strip()
    cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def normalize(raw_text: str) -> AnalysisResult:
    cleaned = strip_code_fences(raw_text)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Model output is not valid JSON: %s", e)
        raise FormatError("parse", str(e)) from e

    if not isinstance(parsed, dict):
        logger.error("Model output is JSON %s, expected an object", type(parsed).__name__)
        raise FormatError("schema", f"expected a JSON object, got {type(parsed).__name__}")

    try:
        return AnalysisResult.model_validate(parsed)
    except ValidationError as e:
        logger.error("Model output violates the result schema: %d error(s)", e.error_count())
        raise FormatError("schema", str(e)) from e
