"""Core configuration settings for pipeline-xray.

Settings are loaded from environment variables with .env file support via
pydantic-settings.

Environment variables:
    OPENAI_BASE_URL: OpenAI-compatible endpoint (empty uses the SDK default)
    OPENAI_API_KEY: API key for the endpoint
    REASONER_MODEL: Model used by OpenAIReasoner
    REASONER_RETRIES: Attempts per reasoner call
    REASONER_RETRY_DELAY_SECONDS: Delay between reasoner attempts
    LMNR_PROJECT_API_KEY: Laminar project key for LLM span tracing

Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values

Example:
    >>> from pipeline_xray.settings import settings
    >>> print(settings.reasoner_model)
    gpt-oss-120b

Note:
    Settings are loaded once at module import and frozen. The process must be
    restarted to pick up changes to environment variables or the .env file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the reasoner endpoint and observability.

    Attributes:
        openai_base_url: OpenAI-compatible API URL. Empty string lets the
                        OpenAI SDK fall back to its own default.

        openai_api_key: Authentication key for the endpoint.

        reasoner_model: Model name passed to every reasoner call.

        reasoner_retries: Number of attempts before a reasoner call fails
                         with ReasonerError.

        reasoner_retry_delay_seconds: Pause between failed attempts.

        lmnr_project_api_key: Laminar (LMNR) project API key. Tracing of
                              reasoner calls is disabled when empty.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Reasoner endpoint
    openai_base_url: str = ""
    openai_api_key: str = ""
    reasoner_model: str = "gpt-oss-120b"
    reasoner_retries: int = Field(default=3, ge=1)
    reasoner_retry_delay_seconds: float = Field(default=1.0, ge=0)

    # Observability
    lmnr_project_api_key: str = ""


settings = Settings()
"""Global settings instance, created at import time."""
