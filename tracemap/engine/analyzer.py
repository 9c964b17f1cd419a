"""
Request handling for TraceMap analyses.

AnalysisService runs one request through
RECEIVED → AUTHORIZED → SCORED → EXPLAINED → RESPONDED:

1. Reject unless the caller set authorized=true (AuthorizationError).
2. Email path only: reject identifiers without "@" (ValidationError).
3. Score with the pure scoring functions.
4. Ask the explainer for bullets (falls back to canned text on failure).
5. Assemble the response model.

The service holds no per-request state; the HTTP layer and the CLI build
one per call with whatever Explainer they want injected.
"""

from __future__ import annotations

from tracemap.ai.explainer import Explainer
from tracemap.ai.prompts import (
    EMAIL_FALLBACK_EXPLANATION,
    email_prompt,
    module_fallback,
    module_prompt,
)
from tracemap.ai.risk_scorer import build_exposure_summary, score_email, score_module
from tracemap.core.constants import (
    EMAIL_DISCLAIMER,
    EMAIL_EXPLANATION_LIMIT,
    EMAIL_RECOMMENDATIONS,
    MODULE_DISCLAIMER,
    MODULE_EXPLANATION_LIMIT,
    MODULE_EXPOSURE_SUMMARIES,
    MODULE_MISSING_INPUT,
    VALID_EMAIL_REQUIRED,
    ModuleType,
    RiskLevel,
)
from tracemap.core.exceptions import AuthorizationError, ValidationError
from tracemap.core.logging import get_audit_logger, get_logger
from tracemap.models import (
    EmailAnalysisRequest,
    EmailAnalysisResponse,
    ModuleAnalysisRequest,
    ModuleAnalysisResponse,
)
from tracemap.utils.validators import has_email_shape, mask_email

logger = get_logger(__name__)
audit_logger = get_audit_logger()


class AnalysisService:
    """Authorizes, scores and explains a single analysis request."""

    def __init__(self, explainer: Explainer, audit: bool = True) -> None:
        self.explainer = explainer
        self.audit = audit

    async def analyze_email(self, request: EmailAnalysisRequest) -> EmailAnalysisResponse:
        """Flagship four-signal analysis of an email address."""
        if not request.authorized:
            raise AuthorizationError()

        email = request.identifier
        if not has_email_shape(email):
            raise ValidationError("email", email, VALID_EMAIL_REQUIRED)

        analysis = score_email(email)
        masked = mask_email(email)
        explanation = await self.explainer.explain(
            email_prompt(masked, analysis.final_score, analysis.risk_level.value),
            fallback=EMAIL_FALLBACK_EXPLANATION,
            limit=EMAIL_EXPLANATION_LIMIT,
        )

        self._record("/analyze-email", masked, analysis.final_score, analysis.risk_level)
        return EmailAnalysisResponse(
            email=email,
            risk_score=analysis.final_score,
            risk_level=analysis.risk_level,
            exposure_summary=build_exposure_summary(analysis.signals),
            ai_explanation=explanation,
            recommendations=list(EMAIL_RECOMMENDATIONS),
            disclaimer=EMAIL_DISCLAIMER,
        )

    async def analyze_module(
        self, request: ModuleAnalysisRequest, module_type: ModuleType | str
    ) -> ModuleAnalysisResponse:
        """Per-module analysis (Text, Image, Location, Code)."""
        module_type = ModuleType(module_type)
        if not request.authorized:
            raise AuthorizationError()

        effective_input = request.input_value or MODULE_MISSING_INPUT
        result = score_module(effective_input, module_type)
        explanation = await self.explainer.explain(
            module_prompt(module_type.value, effective_input, result.final_score, result.level.value),
            fallback=module_fallback(module_type.value),
            limit=MODULE_EXPLANATION_LIMIT,
        )

        self._record(
            f"/analyze/{module_type.value.lower()}-osint",
            mask_email(effective_input),
            result.final_score,
            result.level,
        )
        return ModuleAnalysisResponse(
            input=request.input_value,
            risk_score=result.final_score,
            risk_level=result.level,
            exposure_summary=dict(MODULE_EXPOSURE_SUMMARIES[module_type]),
            ai_explanation=explanation,
            recommendations=[f"Minimize {module_type.value} signals"],
            disclaimer=MODULE_DISCLAIMER,
        )

    def _record(self, endpoint: str, identifier: str, score: float, level: RiskLevel) -> None:
        logger.info("analysis_completed", endpoint=endpoint, risk_score=score, risk_level=level.value)
        if self.audit:
            audit_logger.info(
                "analysis_audited",
                endpoint=endpoint,
                identifier=identifier,
                risk_level=level.value,
            )
