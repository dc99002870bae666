"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Coach engine configuration. All values come from environment variables."""

    # Assistant
    assistant_name: str = Field(default="Edutu AI")

    # Remote generation: cloud function endpoint
    chat_endpoint_url: str = Field(default="")
    chat_endpoint_token: str = Field(default="")

    # Remote generation: direct LLM
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    chat_max_tokens: int = Field(default=1024)

    # Circuit breaker / timeouts
    remote_timeout_seconds: float = Field(default=15.0)
    max_retries: int = Field(default=2)

    # Conversation
    history_cap: int = Field(default=21)
    recent_turns_limit: int = Field(default=8)
    turn_content_limit: int = Field(default=500)

    # Retrieval
    candidate_pool_size: int = Field(default=50)
    top_k: int = Field(default=5)
    min_relevance_score: float = Field(default=3)

    # Database
    database_path: Path = Field(default=Path("data/coach.db"))

    # Turso (hosted libSQL): when set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Chat log
    chat_log_enabled: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_remote_backends(self) -> list[str]:
        """Names of the remote backends that are configured, in call order."""
        backends = []
        if self.chat_endpoint_url.strip():
            backends.append("http")
        if self.anthropic_api_key.strip():
            backends.append("anthropic")
        return backends


settings = Settings()
