from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from runner_provisioner.models import Credential, RegistrationToken, RepositoryRef, RunnerPackage, ServiceState


class FakeRegistrationClient:
    """Returns a canned token, or raises ``error``; records every exchange."""

    def __init__(self, token: str = "xyz", error: Optional[Exception] = None) -> None:
        self.token = token
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    def request_registration_token(self, repo: RepositoryRef | str, credential: Credential) -> RegistrationToken:
        self.calls.append((str(repo), credential.reveal()))
        credential.discard()
        if self.error is not None:
            raise self.error
        return RegistrationToken(value=self.token)


class FakePackageProvisioner:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[Tuple[str, str, Path]] = []

    def ensure_package(self, version: str, platform: str, cache_dir: Path | str) -> Path:
        self.calls.append((version, platform, Path(cache_dir)))
        if self.error is not None:
            raise self.error
        return Path(cache_dir) / RunnerPackage(version, platform).filename


class FakeInstaller:
    def __init__(self, errors: Optional[Dict[str, Exception]] = None) -> None:
        self.errors = errors or {}
        self.calls: List[tuple] = []
        self.state = ServiceState.NOT_INSTALLED

    def _step(self, name: str) -> None:
        if name in self.errors:
            raise self.errors[name]

    def configure(self, runner_home: Path, repo_url: str, token: RegistrationToken, runner_name: str) -> None:
        self.calls.append(("configure", Path(runner_home), repo_url, token.consume(), runner_name))
        self._step("configure")

    def install_service(self) -> None:
        self.calls.append(("install",))
        self._step("install")
        self.state = ServiceState.INSTALLED

    def start_service(self) -> None:
        self.calls.append(("start",))
        self._step("start")
        self.state = ServiceState.RUNNING
