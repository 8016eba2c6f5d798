from __future__ import annotations

import pytest

from badge_issuer.core.config import AppEnv, Settings, load_settings

_GITHUB_VARS = ("GITHUB_TOKEN", "GITHUB_USER", "GITHUB_REPO", "BADGE_STORAGE_URL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (*_GITHUB_VARS, "APP_ENV", "LOG_LEVEL", "LOG_JSON", "HISTORY_PAGES"):
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.history_pages == 1
    assert settings.github_api_url == "https://api.github.com"
    assert settings.store_configured is False
    assert settings.storage_url is None


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True


def test_load_settings_normalizes_case_and_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  PROD ")
    monkeypatch.setenv("LOG_LEVEL", " DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_storage_url_defaults_to_github_pages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "t")
    monkeypatch.setenv("GITHUB_USER", "acme")
    monkeypatch.setenv("GITHUB_REPO", "badges")
    settings = load_settings()
    assert settings.store_configured is True
    assert settings.storage_url == "https://acme.github.io/badges"


def test_explicit_storage_url_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_USER", "acme")
    monkeypatch.setenv("GITHUB_REPO", "badges")
    monkeypatch.setenv("BADGE_STORAGE_URL", "https://badges.acme.org/")
    settings = load_settings()
    assert settings.storage_url == "https://badges.acme.org"
    assert settings.store_configured is False


def test_workflow_config_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_USER", "acme")
    monkeypatch.setenv("GITHUB_REPO", "badges")
    cfg = load_settings().workflow_config()
    assert (cfg.user, cfg.repo, cfg.storage) == ("acme", "badges", "https://acme.github.io/badges")


def test_workflow_config_requires_repo() -> None:
    with pytest.raises(ValueError, match="GITHUB_USER, GITHUB_REPO"):
        load_settings().workflow_config()


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_non_integer_history_pages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HISTORY_PAGES", "lots")
    with pytest.raises(ValueError, match="HISTORY_PAGES must be an integer"):
        load_settings()


def test_load_settings_rejects_zero_history_pages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HISTORY_PAGES", "0")
    with pytest.raises(ValueError, match="HISTORY_PAGES must be >= 1"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        github_token=None,
        github_user=None,
        github_repo=None,
        github_api_url="https://api.github.com",
        storage_url=None,
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    assert _make_settings("prod").is_prod is True
    assert _make_settings("prod").is_dev is False


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
