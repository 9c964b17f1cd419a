"""
Tests for the analysis request handling layer.
"""

from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from tracemap.ai.explainer import Explainer
from tracemap.ai.prompts import EMAIL_FALLBACK_EXPLANATION
from tracemap.core.constants import ModuleType, RiskLevel
from tracemap.core.exceptions import AuthorizationError, ValidationError
from tracemap.engine.analyzer import AnalysisService
from tracemap.models import EmailAnalysisRequest, ModuleAnalysisRequest


@pytest.fixture
def service(explainer) -> AnalysisService:
    return AnalysisService(explainer)


class TestAnalyzeEmail:
    """Tests for AnalysisService.analyze_email"""

    @pytest.mark.asyncio
    async def test_full_response(self, service, sample_email):
        result = await service.analyze_email(
            EmailAnalysisRequest(email=sample_email, authorized=True)
        )

        assert result.email == sample_email
        assert result.risk_score == 6.0
        assert result.risk_level == RiskLevel.HIGH
        assert result.exposure_summary == {
            "public_presence": "Significant Public Footprint",
            "platform_reuse": "Extensive Cross-Platform Reuse",
            "developer_exposure": "Minimal Technical Footprint",
            "metadata_visibility": "Restricted Metadata Clues",
        }
        assert len(result.ai_explanation) == 3
        assert result.recommendations == [
            "Review privacy settings",
            "Avoid email reuse",
            "Monitor exposure",
        ]
        assert result.disclaimer == "Simulated public data for educational purposes only."

    @pytest.mark.asyncio
    async def test_prompt_uses_masked_email(self, service, fake_client, sample_email):
        await service.analyze_email(EmailAnalysisRequest(email=sample_email, authorized=True))

        assert fake_client.prompts == [
            'Explain WHY the risk level "HIGH" was assigned to a****@example.com '
            "(Score: 6/10.0). Bullet points, professional academic tone."
        ]

    @pytest.mark.asyncio
    async def test_unauthorized_rejected_before_scoring(self, service, fake_client, sample_email):
        with patch("tracemap.engine.analyzer.score_email") as scorer:
            with pytest.raises(AuthorizationError):
                await service.analyze_email(
                    EmailAnalysisRequest(email=sample_email, authorized=False)
                )

        assert scorer.call_count == 0
        assert fake_client.prompts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", [None, "", "not-an-email"])
    async def test_missing_at_rejected(self, service, email):
        with pytest.raises(ValidationError) as exc_info:
            await service.analyze_email(EmailAnalysisRequest(email=email, authorized=True))

        assert str(exc_info.value) == "Valid Gmail ID required"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_input_value_accepted_as_identifier(self, service):
        result = await service.analyze_email(
            EmailAnalysisRequest(input_value="admin@example.com", input_type="Email", authorized=True)
        )

        assert result.email == "admin@example.com"
        assert result.risk_score == 6.0

    @pytest.mark.asyncio
    async def test_explanation_failure_uses_fallback(self, failing_client, sample_email):
        service = AnalysisService(Explainer(failing_client, timeout=1.0))

        result = await service.analyze_email(
            EmailAnalysisRequest(email=sample_email, authorized=True)
        )

        assert result.ai_explanation == EMAIL_FALLBACK_EXPLANATION
        assert result.risk_level == RiskLevel.HIGH


class TestAnalyzeModule:
    """Tests for AnalysisService.analyze_module"""

    @pytest.mark.asyncio
    async def test_location_response(self, service):
        result = await service.analyze_module(
            ModuleAnalysisRequest(input_value="default", authorized=True), ModuleType.LOCATION
        )

        assert result.input == "default"
        assert result.risk_score == 1.7
        assert result.risk_level == RiskLevel.LOW
        assert result.exposure_summary == {"timezone": "Simulated"}
        assert result.recommendations == ["Minimize Location signals"]
        assert result.disclaimer == "Simulated data for education."

    @pytest.mark.asyncio
    async def test_missing_input_scores_placeholder(self, service, fake_client):
        result = await service.analyze_module(
            ModuleAnalysisRequest(authorized=True), ModuleType.CODE
        )

        # "forensic_stream" seed 15: (15 % 35) + 15 = 30
        assert result.input is None
        assert result.risk_score == 3.0
        assert "forensic_stream" in fake_client.prompts[0]

    @pytest.mark.asyncio
    async def test_module_prompt_verbatim(self, service, fake_client):
        await service.analyze_module(
            ModuleAnalysisRequest(input_value="default", authorized=True), "Location"
        )

        assert fake_client.prompts == [
            "Explain why a Location OSINT risk score of 1.7 (LOW) was assigned to default. "
            "4 bullet points, calm academic language. No hacking."
        ]

    @pytest.mark.asyncio
    async def test_explanation_truncated_to_four(self, mock_client):
        mock_client.generate.return_value = "\n".join(
            f"- observation {i} about the public footprint" for i in range(8)
        )
        service = AnalysisService(Explainer(mock_client, timeout=1.0))

        result = await service.analyze_module(
            ModuleAnalysisRequest(input_value="root_user", authorized=True), ModuleType.TEXT
        )

        assert len(result.ai_explanation) == 4

    @pytest.mark.asyncio
    async def test_explanation_failure_uses_module_fallback(self, failing_client):
        service = AnalysisService(Explainer(failing_client, timeout=1.0))

        result = await service.analyze_module(
            ModuleAnalysisRequest(input_value="photo.jpg", authorized=True), ModuleType.IMAGE
        )

        assert result.ai_explanation == [
            "The Image analysis has identified deterministic patterns in public footprints.",
            "Educational awareness of these vectors is recommended for privacy.",
        ]

    @pytest.mark.asyncio
    async def test_unauthorized_rejected_before_scoring(self, service, fake_client):
        with patch("tracemap.engine.analyzer.score_module") as scorer:
            with pytest.raises(AuthorizationError):
                await service.analyze_module(
                    ModuleAnalysisRequest(input_value="x", authorized=False), ModuleType.TEXT
                )

        scorer.assert_not_called()
        assert fake_client.prompts == []


class TestAuditLogging:
    """Accepted analyses are audited with a masked identifier."""

    @pytest.mark.asyncio
    async def test_audit_event_carries_masked_email(self, service, sample_email):
        with capture_logs() as logs:
            await service.analyze_email(EmailAnalysisRequest(email=sample_email, authorized=True))

        audited = [entry for entry in logs if entry["event"] == "analysis_audited"]
        assert len(audited) == 1
        assert audited[0]["identifier"] == "a****@example.com"
        assert audited[0]["endpoint"] == "/analyze-email"
        assert audited[0]["risk_level"] == "HIGH"

    @pytest.mark.asyncio
    async def test_raw_email_never_logged(self, failing_client, sample_email):
        service = AnalysisService(Explainer(failing_client, timeout=1.0))

        with capture_logs() as logs:
            await service.analyze_email(EmailAnalysisRequest(email=sample_email, authorized=True))

        assert logs
        assert all(sample_email not in str(entry) for entry in logs)

    @pytest.mark.asyncio
    async def test_audit_disabled(self, explainer, sample_email):
        service = AnalysisService(explainer, audit=False)

        with capture_logs() as logs:
            await service.analyze_email(EmailAnalysisRequest(email=sample_email, authorized=True))

        assert not [entry for entry in logs if entry["event"] == "analysis_audited"]
        assert [entry for entry in logs if entry["event"] == "analysis_completed"]

    @pytest.mark.asyncio
    async def test_rejected_request_not_audited(self, service, sample_email):
        with capture_logs() as logs:
            with pytest.raises(AuthorizationError):
                await service.analyze_email(
                    EmailAnalysisRequest(email=sample_email, authorized=False)
                )

        assert not [entry for entry in logs if entry["event"] == "analysis_audited"]

    @pytest.mark.asyncio
    async def test_module_audit_event(self, service):
        with capture_logs() as logs:
            await service.analyze_module(
                ModuleAnalysisRequest(input_value="dev@corp.io", authorized=True), ModuleType.CODE
            )

        audited = [entry for entry in logs if entry["event"] == "analysis_audited"]
        assert audited[0]["identifier"] == "d**@corp.io"
        assert audited[0]["endpoint"] == "/analyze/code-osint"
