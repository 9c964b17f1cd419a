"""
Deterministic exposure risk scoring for TraceMap.

No data is collected: every signal is synthesized from the length and
substring content of the submitted identifier. Two formulas exist and are
kept apart on purpose:

- score_email(): the four-signal model behind /analyze-email.
- score_module(): the simpler per-module formula behind /analyze/*-osint.

They do not produce comparable scores for the same input.

Usage:
    result = score_email("admin@example.com")
    # EmailRiskResult(final_score=6.0, risk_level=RiskLevel.HIGH, ...)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from tracemap.core.constants import (
    DEVELOPER_WORDS,
    EXPOSURE_LABELS,
    MAX_RISK_SCORE,
    MODULE_DEFAULT_SEED_INPUT,
    MODULE_FORMULAS,
    PLATFORM_REUSE_WORDS,
    RISK_THRESHOLDS,
    SHORT_LOCAL_PART_LENGTH,
    ModuleType,
    RiskLevel,
)
from tracemap.models import EmailRiskResult, ModuleRiskResult, SignalBundle
from tracemap.utils.validators import local_part


def _round1(value: float) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def score_to_level(score: float) -> RiskLevel:
    """Map a numeric risk score to a RiskLevel (inclusive lower bounds)."""
    for threshold, level in RISK_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def compute_signals(email: str) -> SignalBundle:
    """Derive the four exposure sub-scores from an email address."""
    lower_email = email.lower()
    local = local_part(lower_email)
    seed = len(local)

    public_presence = 20 if len(local) < SHORT_LOCAL_PART_LENGTH else 0
    public_presence += (seed * 3) % 10

    platform_reuse = 20 if any(word in lower_email for word in PLATFORM_REUSE_WORDS) else 0
    platform_reuse += seed % 10

    developer_exposure = 15 if any(word in lower_email for word in DEVELOPER_WORDS) else 0
    developer_exposure += seed % 5

    # Dotless addresses tend to be older, more generic formats
    metadata_visibility = (seed % 15) + 5
    if "." not in lower_email:
        metadata_visibility += 5

    return SignalBundle(
        public_presence=public_presence,
        platform_reuse=platform_reuse,
        developer_exposure=developer_exposure,
        metadata_visibility=metadata_visibility,
    )


def score_email(email: str) -> EmailRiskResult:
    """
    Score an email address with the four-signal model.

    Callers must reject identifiers without "@" beforehand.
    """
    signals = compute_signals(email)
    final_score = min(MAX_RISK_SCORE, _round1(signals.internal_score / 100 * 10))
    return EmailRiskResult(
        signals=signals,
        final_score=final_score,
        risk_level=score_to_level(final_score),
    )


def score_module(input_value: str | None, module_type: ModuleType | str) -> ModuleRiskResult:
    """
    Score an identifier with the per-module formula.

    score = (seed mod N) + offset, plus a flat bonus when a trigger substring
    appears (Text: admin/root, Code: api/key). Triggers are case-sensitive.
    """
    module_type = ModuleType(module_type)
    text = input_value or MODULE_DEFAULT_SEED_INPUT
    seed = len(text)

    modulus, offset, triggers, bonus = MODULE_FORMULAS[module_type]
    score = (seed % modulus) + offset
    if any(word in text for word in triggers):
        score += bonus

    final_score = _round1(min(MAX_RISK_SCORE, score / 10))
    return ModuleRiskResult(final_score=final_score, level=score_to_level(final_score))


def build_exposure_summary(signals: SignalBundle) -> dict[str, str]:
    """Map each signal to its high- or low-exposure label."""
    summary: dict[str, str] = {}
    for name, (threshold, high_label, low_label) in EXPOSURE_LABELS.items():
        summary[name] = high_label if getattr(signals, name) > threshold else low_label
    return summary
