from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PerformanceRating = Literal["Excellent", "Good", "Average", "Below Average", "Poor"]


class AnalysisResult(BaseModel):
    """Structured assessment produced by the model.

    Validated strictly: no type coercion, unknown keys are dropped.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    match_score: int = Field(..., alias="matchScore", ge=0, le=100)
    performance_rating: PerformanceRating = Field(..., alias="performanceRating")
    strengths: list[str] = Field(..., min_length=1)
    weaknesses: list[str] = Field(..., min_length=1)
    improvement_suggestions: list[str] = Field(..., alias="improvementSuggestions", min_length=1)
    keywords_found: list[str] = Field(..., alias="keywordsFound")
    keywords_missing: list[str] = Field(..., alias="keywordsMissing")
    summary: str


class Envelope(BaseModel):
    """Caller-facing response: a body plus the HTTP status it travels with."""

    status_code: int = 200
    success: bool
    data: AnalysisResult | None = None
    error: str | None = None
    kind: str | None = None
    detail: str | None = None

    def body(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data.model_dump(by_alias=True)}
        content: dict[str, Any] = {"error": self.error}
        if self.kind is not None:
            content["kind"] = self.kind
        if self.detail is not None:
            content["detail"] = self.detail
        return content
