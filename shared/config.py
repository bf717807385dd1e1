"""
Shared configuration management for the GitHub auth service.
"""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthMode(str, Enum):
    """How a caller's credential is presented to GitHub."""

    TOKEN = "token"
    BASIC = "basic"


class GitHubClientOptions(BaseModel):
    """Connection options handed to every GitHub client."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.github.com"
    timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "github-team-auth"
    page_size: int = Field(default=100, ge=1, le=100)
    max_pages: int = Field(default=1000, ge=1)
    headers: Dict[str, str] = Field(default_factory=dict)


class GitHubAuthConfig(BaseSettings):
    """Authenticator configuration, read once at construction."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_AUTH_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Organization filter; empty means every organization contributes teams
    org: str = ""
    # Kept as a plain string so unknown modes reach the authenticator and fail there
    mode: str = AuthMode.TOKEN.value
    cache_ttl: int = Field(default=5, ge=1, description="Membership cache TTL in minutes")
    orgmode: bool = False
    cache_max_entries: int = Field(default=10000, ge=1)
    log_level: str = "info"

    client: GitHubClientOptions = Field(default_factory=GitHubClientOptions)

    @field_validator("mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value):
        if isinstance(value, AuthMode):
            return value.value
        if value is None or value == "":
            return AuthMode.TOKEN.value
        return str(value).strip().lower()

    @field_validator("org", mode="before")
    @classmethod
    def _normalise_org(cls, value):
        return (value or "").strip()

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl * 60


def get_config(**overrides) -> GitHubAuthConfig:
    """Load configuration from the environment, with explicit overrides on top."""
    return GitHubAuthConfig(**overrides)
