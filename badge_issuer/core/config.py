from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from badge_issuer.services.issuance import WorkflowConfig

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    github_token: str | None
    github_user: str | None
    github_repo: str | None
    github_api_url: str
    storage_url: str | None
    history_pages: int = 1

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def store_configured(self) -> bool:
        return bool(self.github_token and self.github_user and self.github_repo)

    def workflow_config(self) -> WorkflowConfig:
        from badge_issuer.services.issuance import WorkflowConfig

        if not (self.github_user and self.github_repo and self.storage_url):
            raise ValueError("GITHUB_USER, GITHUB_REPO and a storage URL are required")
        return WorkflowConfig(
            user=self.github_user,
            repo=self.github_repo,
            storage=self.storage_url,
        )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    pages_raw = _getenv("HISTORY_PAGES", "1")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        history_pages = int(pages_raw)
    except ValueError:
        raise ValueError(
            f"HISTORY_PAGES must be an integer (got {pages_raw!r})"
        ) from None
    if history_pages < 1:
        raise ValueError(f"HISTORY_PAGES must be >= 1 (got {history_pages})")

    github_token = _getenv("GITHUB_TOKEN", "") or None
    github_user = _getenv("GITHUB_USER", "") or None
    github_repo = _getenv("GITHUB_REPO", "") or None
    github_api_url = _getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")

    # GitHub Pages serves the repository at <user>.github.io/<repo>
    storage_url = _getenv("BADGE_STORAGE_URL", "") or None
    if storage_url is None and github_user and github_repo:
        storage_url = f"https://{github_user}.github.io/{github_repo}"

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        port=port,
        github_token=github_token,
        github_user=github_user,
        github_repo=github_repo,
        github_api_url=github_api_url,
        storage_url=storage_url.rstrip("/") if storage_url else None,
        history_pages=history_pages,
    )


SETTINGS = load_settings()
