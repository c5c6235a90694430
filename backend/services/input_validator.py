from typing import Any, NamedTuple

from services.errors import InputValidationError

MIN_RESUME_CHARS = 50
MIN_JOB_DESCRIPTION_CHARS = 30


class ValidatedInput(NamedTuple):
    resume_text: str
    job_description: str


def _check(value: Any, label: str, min_chars: int) -> str:
    if not isinstance(value, str):
        raise InputValidationError("missing_field", f"{label} is required.")
    trimmed = value.strip()
    if len(trimmed) < min_chars:
        raise InputValidationError(
            "too_short", f"{label} must be at least {min_chars} characters."
        )
    return trimmed


def validate(resume_text: Any, job_description: Any) -> ValidatedInput:
    """Check both inputs and return them trimmed (not truncated)."""
    return ValidatedInput(
        resume_text=_check(resume_text, "Resume", MIN_RESUME_CHARS),
        job_description=_check(job_description, "Job description", MIN_JOB_DESCRIPTION_CHARS),
    )
