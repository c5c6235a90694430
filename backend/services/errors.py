"""Error taxonomy for the analysis pipeline.

Every failure is raised as an ``AnalysisError`` subclass at the component
that detects it and converted into a response by ``result_envelope.wrap``.
``message`` is safe to show to users; ``detail`` is diagnostic only.
"""


class AnalysisError(Exception):
    kind: str = "analysis_error"

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InputValidationError(AnalysisError):
    """Client-caused: missing or too-short input. No remote call is made."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class UpstreamError(AnalysisError):
    """The completion service failed, was rate limited, or timed out."""

    kind = "upstream_error"

    def __init__(self, cause: str, detail: str = "") -> None:
        if cause == "timeout":
            message = "AI service timed out. Please try again."
        else:
            message = "AI service is unavailable. Please try again later."
        super().__init__(message, detail or cause)
        self.cause = cause


class FormatError(AnalysisError):
    """The model produced unparsable or schema-violating output."""

    kind = "format_error"

    def __init__(self, reason: str, detail: str = "") -> None:
        super().__init__("AI returned unexpected format. Please try again.", detail or reason)
        self.reason = reason
