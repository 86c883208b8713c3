"""Pytest configuration and fixtures."""
from __future__ import annotations

import io

import pytest
from aws_lambda_powertools import Logger

from runner_provisioner.config import Settings
from runner_provisioner.runner_controller import RunnerController
from tests.fakes import FakeInstaller, FakePackageProvisioner, FakeRegistrationClient

# Shared by every test so log output can be searched for leaked secrets.
LOG_STREAM = io.StringIO()
TEST_LOGGER = Logger(service="runner-provisioner-tests", level="DEBUG", stream=LOG_STREAM)


@pytest.fixture
def log_stream() -> io.StringIO:
    LOG_STREAM.seek(0)
    LOG_STREAM.truncate()
    return LOG_STREAM


@pytest.fixture
def logger(log_stream: io.StringIO) -> Logger:
    return TEST_LOGGER


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        github_repo=None,
        github_pat=None,
        github_url="https://github.com",
        github_api_url=None,
        runner_version="2.311.0",
        runner_platform="linux-x64",
        runner_download_url="https://github.com/actions/runner/releases/download",
        runner_home=tmp_path / "actions-runner",
        runner_name="build-host",
        runner_labels=[],
        runner_workspace=None,
        runner_group=None,
        runner_sha256=None,
        runner_elevation_command="sudo",
        http_timeout=30,
        log_level="WARNING",
    )


@pytest.fixture
def fake_registration_client() -> FakeRegistrationClient:
    return FakeRegistrationClient()


@pytest.fixture
def fake_package_provisioner() -> FakePackageProvisioner:
    return FakePackageProvisioner()


@pytest.fixture
def fake_installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def controller(
    settings: Settings,
    logger: Logger,
    fake_registration_client: FakeRegistrationClient,
    fake_package_provisioner: FakePackageProvisioner,
    fake_installer: FakeInstaller,
) -> RunnerController:
    """A RunnerController wired to fake services."""
    return RunnerController(
        settings,
        logger,
        registration_client=fake_registration_client,
        package_provisioner=fake_package_provisioner,
        installer=fake_installer,
    )
