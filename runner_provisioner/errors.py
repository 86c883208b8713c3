from __future__ import annotations

from .models import Stage

SCOPES_HINT = "check token scopes and repository name"


class ProvisioningError(Exception):
    """Base class for every failure that aborts a registration run."""

    stage: Stage = Stage.INPUT

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def describe(self) -> str:
        text = f"[{self.stage.value}] {self.message}"
        if self.hint:
            text = f"{text} ({self.hint})"
        return text


# ---- Operator input ----

class ValidationError(ProvisioningError):
    stage = Stage.VALIDATE


class MissingRepositoryError(ValidationError):
    def __init__(self) -> None:
        super().__init__("repository is required (format: owner/repo)")


class MissingCredentialError(ValidationError):
    def __init__(self) -> None:
        super().__init__("personal access token is required")


class MalformedRepositoryError(ValidationError):
    def __init__(self, repo: str) -> None:
        super().__init__(f"repository {repo!r} is not in owner/repo format")


# ---- Package fetch / extract ----

class ProvisionError(ProvisioningError):
    stage = Stage.DOWNLOAD


class DownloadError(ProvisionError):
    pass


class ChecksumError(ProvisionError):
    pass


class ExtractError(ProvisionError):
    pass


# ---- Registration token exchange ----

class RegistrationError(ProvisioningError):
    stage = Stage.REGISTER


class AuthError(RegistrationError):
    def __init__(self, message: str) -> None:
        super().__init__(message, hint=SCOPES_HINT)


class ParseError(RegistrationError):
    pass


class EmptyTokenError(RegistrationError):
    def __init__(self) -> None:
        super().__init__("GitHub returned an empty registration token", hint=SCOPES_HINT)


# ---- Local installation ----

class ConfigureError(ProvisioningError):
    stage = Stage.CONFIGURE


class ServiceError(ProvisioningError):
    stage = Stage.SERVICE


class ServicePermissionError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, hint="re-run with sudo or configure RUNNER_ELEVATION_COMMAND")
