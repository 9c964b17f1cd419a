"""
Pydantic v2 data models for TraceMap.

Every model is request-scoped: built fresh for one analysis and discarded
once the response is serialized. Nothing here is persisted.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from tracemap.core.constants import InputType, RiskLevel


# ── Scoring Engine values ─────────────────────────────────────────

class SignalBundle(BaseModel):
    """
    Four synthesized exposure sub-scores produced by the email path.

    Nominal ranges are 0-30, 0-30, 0-20 and 0-20, but metadata_visibility
    reaches 24 for a dotless address with a 14-character local part. Values
    are not clamped; only the final score is capped at 10.
    """

    public_presence: int = Field(ge=0)
    platform_reuse: int = Field(ge=0)
    developer_exposure: int = Field(ge=0)
    metadata_visibility: int = Field(ge=0)

    @property
    def internal_score(self) -> int:
        return (
            self.public_presence
            + self.platform_reuse
            + self.developer_exposure
            + self.metadata_visibility
        )


class EmailRiskResult(BaseModel):
    """Output of score_email()."""

    signals: SignalBundle
    final_score: float
    risk_level: RiskLevel


class ModuleRiskResult(BaseModel):
    """Output of score_module()."""

    final_score: float
    level: RiskLevel


# ── API bodies ────────────────────────────────────────────────────

class AuthorizedRequest(BaseModel):
    """Body carrying the caller's self-reported authorization checkbox."""

    authorized: bool = False

    @field_validator("authorized", mode="before")
    @classmethod
    def coerce_authorized(cls, v: Any) -> bool:
        # Clients send anything from true to "yes" to 1; any truthy value counts
        return bool(v)


class EmailAnalysisRequest(AuthorizedRequest):
    # The web client posts input_value/input_type to /analyze; email wins when both are set
    email: str | None = None
    input_value: str | None = None
    input_type: InputType | None = None

    @property
    def identifier(self) -> str | None:
        return self.email or self.input_value


class ModuleAnalysisRequest(AuthorizedRequest):
    input_value: str | None = None
    input_type: InputType | None = None


class EmailAnalysisResponse(BaseModel):
    email: str
    risk_score: float
    risk_level: RiskLevel
    exposure_summary: dict[str, str]
    ai_explanation: list[str]
    recommendations: list[str]
    disclaimer: str


class ModuleAnalysisResponse(BaseModel):
    input: str | None
    risk_score: float
    risk_level: RiskLevel
    exposure_summary: dict[str, str]
    ai_explanation: list[str]
    recommendations: list[str]
    disclaimer: str


class ErrorResponse(BaseModel):
    error: str
