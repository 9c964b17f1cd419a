"""
Custom exception hierarchy for TraceMap.

The analysis service raises request errors; the API layer maps them to JSON
error bodies using ``status_code``. Explanation errors never leave the
explainer, which swaps in canned text instead.

Hierarchy:
    TraceMapError
    ├── AuthorizationError
    ├── ValidationError
    ├── ExplanationError
    │   └── ExplanationTimeoutError
    └── ConfigurationError
        └── MissingAPIKeyError
"""

from tracemap.core.constants import AUTHORIZATION_REQUIRED


class TraceMapError(Exception):
    """Base exception for all TraceMap errors."""

    status_code: int = 500


# ── Request Errors ────────────────────────────────────────────────

class AuthorizationError(TraceMapError):
    """The caller did not confirm it is authorized to analyze the target."""

    status_code = 403

    def __init__(self, message: str = AUTHORIZATION_REQUIRED) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TraceMapError):
    """
    Input validation failed.

    Raised when the identifier is missing or has the wrong shape for the
    requested analysis (e.g. an email without ``@``).
    """

    status_code = 400

    def __init__(self, field: str, value: str | None, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(message)


# ── Explanation Errors ────────────────────────────────────────────

class ExplanationError(TraceMapError):
    """The external text-generation service failed or returned nothing usable."""

    status_code = 502

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ExplanationTimeoutError(ExplanationError):
    """The text-generation call did not finish within the configured timeout."""

    def __init__(self, provider: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(provider, f"Timed out after {timeout}s")


# ── Configuration Errors ──────────────────────────────────────────

class ConfigurationError(TraceMapError):
    """Invalid or missing configuration."""

    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        super().__init__(f"Configuration error for '{setting}': {message}")


class MissingAPIKeyError(ConfigurationError):
    """
    The active text-generation provider has no credential configured.

    Raised by the explanation client; the explainer treats it like any other
    provider failure and falls back to canned text.
    """

    def __init__(self, provider: str, env_var: str) -> None:
        self.provider = provider
        self.env_var = env_var
        super().__init__(env_var, f"{provider} API key not configured. Set {env_var} in .env")
