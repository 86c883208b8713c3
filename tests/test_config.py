"""Tests for environment-backed settings."""
import pytest

from runner_provisioner.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("GITHUB_URL", "GITHUB_API_URL", "GITHUB_PAT", "RUNNER_LABELS", "HTTP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)


def test_labels_split_from_csv(monkeypatch) -> None:
    monkeypatch.setenv("RUNNER_LABELS", "self-hosted, linux,,gpu")

    assert Settings(_env_file=None).runner_labels == ["self-hosted", "linux", "gpu"]


def test_api_base_for_github_com() -> None:
    assert Settings(_env_file=None).api_base == "https://api.github.com"


def test_api_base_for_enterprise_server(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_URL", "https://ghe.example.com")

    assert Settings(_env_file=None).api_base == "https://ghe.example.com/api/v3"


def test_explicit_api_url_wins(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_URL", "https://ghe.example.com")
    monkeypatch.setenv("GITHUB_API_URL", "https://api.internal/")

    assert Settings(_env_file=None).api_base == "https://api.internal"


def test_zero_timeout_disables_it(monkeypatch) -> None:
    monkeypatch.setenv("HTTP_TIMEOUT", "0")

    assert Settings(_env_file=None).http_timeout is None


def test_pat_is_masked(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_PAT", "ghp_secret")

    settings = Settings(_env_file=None)

    assert settings.github_pat.get_secret_value() == "ghp_secret"
    assert "ghp_secret" not in repr(settings)


def test_elevation_prefix() -> None:
    assert Settings(_env_file=None, runner_elevation_command="sudo -n").elevation_prefix() == ["sudo", "-n"]
    assert Settings(_env_file=None, runner_elevation_command="").elevation_prefix() == []


@pytest.fixture
def runner_env(monkeypatch):
    monkeypatch.setenv("RUNNER_VERSION", "9.9.9")
    monkeypatch.setenv("RUNNER_PLATFORM", "linux-arm64")
    monkeypatch.setenv("RUNNER_DOWNLOAD_URL", "https://mirror.internal/runner")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")


def test_settings_fixture_ignores_environment(runner_env, settings) -> None:
    assert settings.runner_version == "2.311.0"
    assert settings.runner_platform == "linux-x64"
    assert settings.runner_download_url == "https://github.com/actions/runner/releases/download"
    assert settings.log_level == "WARNING"
