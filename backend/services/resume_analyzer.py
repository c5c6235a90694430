"""Orchestrator: resume/job-description match pipeline.

Pipeline:
1. Input validation (no remote call on failure)
2. Prompt construction (truncation + fixed template)
3. Model completion (the single awaited network call)
4. Response normalization (fence stripping, JSON parse, schema check)
5. Envelope wrapping
"""

import logging
from typing import Any

from config import settings
from models.responses import Envelope
from services import input_validator, prompt_builder, response_normalizer, result_envelope
from services.completion_client import CompletionClient
from services.errors import AnalysisError, InputValidationError, UpstreamError

logger = logging.getLogger(__name__)


async def analyze(
    resume_text: Any,
    job_description: Any,
    client: CompletionClient | None,
    debug: bool | None = None,
) -> Envelope:
    """Run the full pipeline and always return an envelope."""
    if debug is None:
        debug = settings.debug

    try:
        # --- Stage 1: Validation ---
        validated = input_validator.validate(resume_text, job_description)

        # --- Stage 2: Prompt ---
        prompt = prompt_builder.build(validated)
        logger.info(
            "Analyzing resume (%d chars) against job description (%d chars), prompt %s",
            len(validated.resume_text),
            len(validated.job_description),
            prompt.version,
        )

        # --- Stage 3: Completion ---
        if client is None:
            raise UpstreamError("not_configured", "no completion client configured")
        raw_text = await client.complete(prompt)

        # --- Stage 4: Normalization ---
        result = response_normalizer.normalize(raw_text)

    except InputValidationError as e:
        logger.warning("Rejected analysis request: %s", e.message)
        return result_envelope.wrap(e, debug=debug)
    except AnalysisError as e:
        logger.error("Analysis failed (%s): %s", e.kind, e.detail)
        return result_envelope.wrap(e, debug=debug)

    logger.info(
        "Analysis complete: score=%d rating=%s", result.match_score, result.performance_rating
    )
    return result_envelope.wrap(result, debug=debug)
