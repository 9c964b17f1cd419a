"""
Enums and constants used throughout TraceMap.

All enums use str base class for easy JSON serialization.
"""

from enum import StrEnum


class RiskLevel(StrEnum):
    """Exposure risk level derived from a 0-10 risk score."""

    LOW = "LOW"  # Score 0.0 – 2.4
    MEDIUM = "MEDIUM"  # Score 2.5 – 4.9
    HIGH = "HIGH"  # Score 5.0 – 7.4
    CRITICAL = "CRITICAL"  # Score 7.5 – 10.0


class ModuleType(StrEnum):
    """Specialised analysis module, each with its own endpoint and formula."""

    TEXT = "Text"
    IMAGE = "Image"
    LOCATION = "Location"
    CODE = "Code"


class InputType(StrEnum):
    """Kind of identifier the caller says it submitted."""

    EMAIL = "Email"
    USERNAME = "Username"
    DOMAIN = "Domain"


# ── Risk level thresholds (inclusive lower bound) ──
RISK_THRESHOLDS: list[tuple[float, RiskLevel]] = [
    (7.5, RiskLevel.CRITICAL),
    (5.0, RiskLevel.HIGH),
    (2.5, RiskLevel.MEDIUM),
]

MAX_RISK_SCORE = 10.0

# ── Flagship (email) signal triggers ──
PLATFORM_REUSE_WORDS = ("dev", "admin", "test", "support", "root")
DEVELOPER_WORDS = ("git", "code", "dev", "api", "stack", "repo", "engineer")
SHORT_LOCAL_PART_LENGTH = 10

# ── Exposure summary thresholds (strictly greater than) and labels ──
EXPOSURE_LABELS: dict[str, tuple[int, str, str]] = {
    "public_presence": (20, "Significant Public Footprint", "Moderate Public Footprint"),
    "platform_reuse": (20, "Extensive Cross-Platform Reuse", "Limited Correlation Signals"),
    "developer_exposure": (12, "Advanced Technical Trail", "Minimal Technical Footprint"),
    "metadata_visibility": (12, "High Metadata Exposure", "Restricted Metadata Clues"),
}

# ── Module scoring: (modulus, offset, trigger words, trigger bonus) ──
MODULE_FORMULAS: dict[ModuleType, tuple[int, int, tuple[str, ...], int]] = {
    ModuleType.TEXT: (40, 20, ("admin", "root"), 25),
    ModuleType.IMAGE: (30, 30, (), 0),
    ModuleType.LOCATION: (50, 10, (), 0),
    ModuleType.CODE: (35, 15, ("api", "key"), 40),
}
MODULE_DEFAULT_SEED_INPUT = "default"
MODULE_MISSING_INPUT = "forensic_stream"

MODULE_EXPOSURE_SUMMARIES: dict[ModuleType, dict[str, str]] = {
    ModuleType.TEXT: {"public_mentions": "Simulated", "platform_reuse": "Detected"},
    ModuleType.IMAGE: {"metadata": "Substantial"},
    ModuleType.LOCATION: {"timezone": "Simulated"},
    ModuleType.CODE: {"email_exposure": "Detected"},
}

MODULE_ENDPOINTS: dict[ModuleType, str] = {
    ModuleType.TEXT: "/analyze/text-osint",
    ModuleType.IMAGE: "/analyze/image-osint",
    ModuleType.LOCATION: "/analyze/location-osint",
    ModuleType.CODE: "/analyze/code-osint",
}

# ── Response text ──
EMAIL_RECOMMENDATIONS = ["Review privacy settings", "Avoid email reuse", "Monitor exposure"]
EMAIL_DISCLAIMER = "Simulated public data for educational purposes only."
MODULE_DISCLAIMER = "Simulated data for education."

AUTHORIZATION_REQUIRED = "Authorization required"
VALID_EMAIL_REQUIRED = "Valid Gmail ID required"

# ── Explanation post-processing ──
EXPLANATION_MIN_LINE_LENGTH = 20  # lines must be strictly longer
EMAIL_EXPLANATION_LIMIT = 6
MODULE_EXPLANATION_LIMIT = 4

# Returned by the email endpoint when analysis fails unexpectedly
FAILSAFE_EMAIL_RESPONSE = {"risk_score": 1.0, "risk_level": RiskLevel.LOW.value}
