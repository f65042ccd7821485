"""Application configuration using pydantic-settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys (optional: without a key every model call is skipped)
    gemini_api_key: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # HTTP Settings
    http_timeout: float = 10.0  # seconds
    user_agent: str = "Mozilla/5.0 (compatible; RecipeCollector/1.0)"

    # Gemini Settings
    gemini_model: str = "gemini-2.5-flash-lite"
    gemini_temperature: float = 0.1
    gemini_max_tokens: int = 1000
    model_timeout: float = 30.0  # seconds, per model request

    # Pipeline limits
    refine_text_limit: int = 3000  # characters of article text sent for refinement
    enrich_min_text_length: int = 20  # fallback text must be longer than this

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def has_gemini_credentials(self) -> bool:
        """Whether a usable Gemini API key is configured."""
        return bool(self.gemini_api_key and self.gemini_api_key.strip())


# Global settings instance
settings = Settings()
