from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import SecretStr


class Stage(str, Enum):
    INPUT = "input"
    VALIDATE = "validate"
    DOWNLOAD = "download"
    REGISTER = "register"
    CONFIGURE = "configure"
    SERVICE = "service"


class ServiceState(str, Enum):
    NOT_INSTALLED = "not-installed"
    INSTALLED = "installed"
    RUNNING = "running"


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.slug


class Credential:
    """
    Personal access token held only until the registration token exchange.

    The value is masked in ``repr``/``str``; once ``discard`` has been called
    it can no longer be read.
    """

    def __init__(self, value: str | SecretStr | None) -> None:
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        self._secret: Optional[SecretStr] = SecretStr(value or "")

    def __repr__(self) -> str:
        return "Credential('**********')"

    __str__ = __repr__

    def __bool__(self) -> bool:
        return self._secret is not None and bool(self._secret.get_secret_value())

    @property
    def discarded(self) -> bool:
        return self._secret is None

    def reveal(self) -> str:
        if self._secret is None:
            raise RuntimeError("credential has already been used and discarded")
        return self._secret.get_secret_value()

    def discard(self) -> None:
        self._secret = None


@dataclass
class RegistrationToken:
    """Short-lived, single-use token issued by the registration API."""

    value: str = field(repr=False)
    expires_at: Optional[str] = None
    consumed: bool = False

    def consume(self) -> str:
        if self.consumed:
            raise RuntimeError("registration token has already been used")
        self.consumed = True
        return self.value


@dataclass(frozen=True)
class RunnerPackage:
    version: str
    platform: str

    @property
    def filename(self) -> str:
        return f"actions-runner-{self.platform}-{self.version}.tar.gz"

    def download_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/v{self.version}/{self.filename}"


@dataclass
class RegistrationResult:
    repository: RepositoryRef
    runner_name: str
    runner_home: Path
    archive: Path
    service_state: ServiceState = ServiceState.NOT_INSTALLED
