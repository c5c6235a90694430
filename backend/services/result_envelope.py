from models.responses import AnalysisResult, Envelope
from services.errors import AnalysisError, InputValidationError, UpstreamError


def _status_for(error: AnalysisError) -> int:
    if isinstance(error, InputValidationError):
        return 400
    if isinstance(error, UpstreamError):
        return 504 if error.cause == "timeout" else 502
    return 500


def wrap(outcome: AnalysisResult | AnalysisError, debug: bool = False) -> Envelope:
    """Map a pipeline outcome to the caller-facing envelope.

    Diagnostic detail is only attached in debug mode.
    """
    if isinstance(outcome, AnalysisResult):
        return Envelope(success=True, data=outcome)

    return Envelope(
        status_code=_status_for(outcome),
        success=False,
        error=outcome.message,
        kind=outcome.kind if debug else None,
        detail=(outcome.detail or None) if debug else None,
    )
