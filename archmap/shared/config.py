"""
Base configuration for all archmap entry points.

Uses Pydantic Settings for environment-based configuration.
Each entry point extends BaseServiceSettings with its own prefix.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings


class BaseServiceSettings(BaseSettings):
    """Base settings shared by the gateway, the scanner and the CLI."""

    service_name: str = "archmap"

    # GitLab source
    gitlab_api_url: str = "https://gitlab.example.com/api/v4"
    gitlab_token: str = ""
    group: str = "platform"
    tag: str = "services"
    request_timeout_seconds: float = 30.0
    max_concurrency: int = 8
    scan_roots: list[str] = []  # project path prefixes to scan; empty means the whole group

    # Client classification
    internal_module_prefix: str = "git.example.com/platform"
    strict_client_pattern: bool = True
    default_ignores: list[str] = []

    # Snapshot cache
    database_url: str = "sqlite:///archmap-cache.db"

    # Written by the CLI, served by the gateway
    architecture_dir: str = "."

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@dataclass(frozen=True)
class ClassifierConfig:
    """How manifest dependencies are split into internal clients and libraries.

    ``strict`` selects the exact ``<prefix>/openapi/clients/go/<name>[/vN]``
    pattern; otherwise any module under ``internal_prefix`` whose path
    mentions ``client`` qualifies.
    """

    internal_prefix: str = "git.example.com/platform"
    strict: bool = True

    @classmethod
    def from_settings(cls, settings: BaseServiceSettings) -> "ClassifierConfig":
        return cls(
            internal_prefix=settings.internal_module_prefix.strip().rstrip("/"),
            strict=settings.strict_client_pattern,
        )
