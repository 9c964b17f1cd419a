"""
Centralized configuration management.

Loads settings from the environment and an optional .env file.

Usage:
    from tracemap.core.config import settings
    print(settings.ai_provider, settings.api_port)
"""

from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Which setting holds the credential for each text-generation provider
PROVIDER_KEYS: dict[str, str | None] = {
    "gemini": "google_api_key",
    "openai": "openai_api_key",
    "openrouter": "openrouter_api_key",
    "anthropic": "anthropic_api_key",
    "ollama": None,
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    The only credential the default setup needs is GOOGLE_API_KEY. Without it
    the service still runs; explanations fall back to canned text.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────
    app_env: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"
    log_dir: Path | None = None
    audit_log_enabled: bool = True

    # ── HTTP server ───────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    cors_origins: list[str] = ["*"]

    # ── AI explanations ───────────────────────────────────────
    ai_provider: str = "gemini"
    ai_model: str = "gemini-1.5-flash"
    ai_max_tokens: int = 1024
    enable_ai_explanations: bool = True
    explanation_timeout_seconds: float = 8.0

    google_api_key: SecretStr | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: SecretStr | None = None
    openrouter_api_key: SecretStr | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    anthropic_api_key: SecretStr | None = None
    ollama_endpoint: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return v.upper()

    @field_validator("ai_provider")
    @classmethod
    def validate_ai_provider(cls, v: str) -> str:
        if v.lower() not in PROVIDER_KEYS:
            raise ValueError(f"ai_provider must be one of {set(PROVIDER_KEYS)}")
        return v.lower()

    @field_validator("explanation_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("explanation_timeout_seconds must be positive")
        return v

    def has_api_key(self, key_name: str) -> bool:
        """Check if a given API key is configured (not None/empty)."""
        value = getattr(self, key_name, None)
        if value is None:
            return False
        if isinstance(value, SecretStr):
            return bool(value.get_secret_value().strip())
        return bool(value)

    def provider_key_name(self) -> str | None:
        """Name of the setting holding the active provider's credential."""
        return PROVIDER_KEYS[self.ai_provider]

    def provider_configured(self) -> bool:
        """True when the active provider can be called (key present or keyless)."""
        key_name = self.provider_key_name()
        if key_name is None:
            return bool(self.ollama_endpoint)
        return self.has_api_key(key_name)


# ── Singleton ─────────────────────────────────────────────────────
settings = Settings()
