"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEARCH_QUERY = "filename:publiccode.yml in:path"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Explicit GitHub connection settings threaded into the adapter."""

    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"
    token: str | None = None
    user_agent: str = "publiccode-directory/1.0"
    api_version: str = "2022-11-28"


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: SecretStr | None = None
    github_api_base: str = "https://api.github.com"
    github_raw_base: str = "https://raw.githubusercontent.com"
    search_query: str = DEFAULT_SEARCH_QUERY
    default_page_size: int = Field(default=10, ge=1, le=100)
    detail_timeout_seconds: float = 10.0
    max_detail_concurrency: int | None = None
    http_timeout_seconds: float = 30.0

    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    summary_language: str = "English"
    summary_max_readme_tokens: int = 3_000
    summary_cache_size: int = 256

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def github_config(self) -> GitHubConfig:
        """Snapshot the GitHub-related settings as an immutable config object."""
        token = self.github_token.get_secret_value() if self.github_token else None
        return GitHubConfig(
            api_base=self.github_api_base.rstrip("/"),
            raw_base=self.github_raw_base.rstrip("/"),
            token=token or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
