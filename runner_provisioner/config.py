from __future__ import annotations

import socket
from pathlib import Path
from typing import List

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utilities.github import api_base_for

DEFAULT_RUNNER_VERSION = "2.311.0"
DEFAULT_RUNNER_PLATFORM = "linux-x64"
DEFAULT_DOWNLOAD_URL = "https://github.com/actions/runner/releases/download"


def split_csv(value: str) -> List[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


class Settings(BaseSettings):
    """Environment configuration loaded from variables."""

    github_repo: str | None = Field(None, description="owner/name of the target repository")
    github_pat: SecretStr | None = Field(None, description="Personal access token")
    github_url: str = Field("https://github.com")
    github_api_url: str | None = Field(None)
    runner_version: str = Field(DEFAULT_RUNNER_VERSION)
    runner_platform: str = Field(DEFAULT_RUNNER_PLATFORM)
    runner_download_url: str = Field(DEFAULT_DOWNLOAD_URL)
    runner_sha256: str | None = Field(None)
    runner_home: Path = Field(default_factory=lambda: Path.home() / "actions-runner")
    runner_name: str = Field(default_factory=socket.gethostname)
    runner_labels: List[str] = Field(default_factory=list)
    runner_workspace: str | None = Field(None)
    runner_group: str | None = Field(None)
    runner_elevation_command: str | None = Field("sudo")
    http_timeout: float | None = Field(60.0)
    log_level: str = Field("WARNING")

    @field_validator("runner_labels", mode="before")
    @classmethod
    def _split_csv(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return split_csv(v)
        return v

    @field_validator("http_timeout", mode="after")
    @classmethod
    def _zero_disables_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("runner_home", mode="after")
    @classmethod
    def _expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    model_config = SettingsConfigDict(case_sensitive=False, env_file=".env", enable_decoding=False)

    @property
    def api_base(self) -> str:
        """REST API base, derived from ``github_url`` unless set explicitly."""
        if self.github_api_url:
            return self.github_api_url.rstrip("/")
        return api_base_for(self.github_url)

    def elevation_prefix(self) -> List[str]:
        if not self.runner_elevation_command:
            return []
        return self.runner_elevation_command.split()
