from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import List, Optional

from aws_lambda_powertools import Logger

from ..config import Settings
from ..errors import ConfigureError, ServiceError, ServicePermissionError
from ..models import RegistrationToken, ServiceState

CONFIG_SCRIPT = "config.sh"
SERVICE_SCRIPT = "svc.sh"
REDACTED = "***"

_PERMISSION_MARKERS = (
    "must run as sudo",
    "permission denied",
    "not in the sudoers",
    "a password is required",
    "operation not permitted",
)


def redact(cmd: List[str], secret: str) -> str:
    return " ".join(REDACTED if part == secret else part for part in cmd)


def is_root() -> bool:
    return os.geteuid() == 0


class RunnerInstaller:
    """Drives the runner's own ``config.sh`` and ``svc.sh`` entry points."""

    def __init__(self, settings: Settings, logger: Logger, runner_home: Optional[Path] = None) -> None:
        self.settings = settings
        self.logger = logger
        self.runner_home = Path(runner_home or settings.runner_home)
        self.state = ServiceState.NOT_INSTALLED

    def configure(
            self,
            runner_home: Path,
            repo_url: str,
            token: RegistrationToken,
            runner_name: str,
    ) -> None:
        """
        Register the runner unattended, replacing any runner of the same name.

        The token is consumed before ``config.sh`` runs and cannot be reused,
        whatever the outcome.
        """
        self.runner_home = Path(runner_home)
        value = token.consume()
        cmd = [
            str(self.runner_home / CONFIG_SCRIPT),
            "--url", repo_url,
            "--token", value,
            "--name", runner_name,
            "--unattended",
            "--replace",
        ]
        if self.settings.runner_labels:
            cmd.extend(["--labels", ",".join(self.settings.runner_labels)])
        if self.settings.runner_workspace:
            cmd.extend(["--work", self.settings.runner_workspace])
        if self.settings.runner_group:
            cmd.extend(["--runnergroup", self.settings.runner_group])

        self.logger.info("Configuring runner", extra={"command": redact(cmd, value)})
        try:
            result = subprocess.run(cmd, cwd=self.runner_home)
        except OSError as e:
            raise ConfigureError(f"cannot run {CONFIG_SCRIPT}: {e}") from e
        if result.returncode != 0:
            raise ConfigureError(f"{CONFIG_SCRIPT} exited with code {result.returncode}")
        self.logger.info("Runner configured", extra={"runner_name": runner_name})

    def install_service(self) -> None:
        self._service("install")
        self.state = ServiceState.INSTALLED

    def start_service(self) -> None:
        self._service("start")
        self.state = ServiceState.RUNNING

    def _service_command(self, action: str) -> List[str]:
        cmd = [str(self.runner_home / SERVICE_SCRIPT), action]
        if is_root():
            return cmd
        prefix = self.settings.elevation_prefix()
        if not prefix:
            raise ServicePermissionError(f"'{SERVICE_SCRIPT} {action}' requires root privileges")
        return prefix + cmd

    def _service(self, action: str) -> None:
        cmd = self._service_command(action)
        self.logger.info("Running service step", extra={"command": " ".join(cmd)})
        try:
            result = subprocess.run(cmd, cwd=self.runner_home, capture_output=True, text=True)
        except FileNotFoundError as e:
            if cmd[0] != str(self.runner_home / SERVICE_SCRIPT):
                raise ServicePermissionError(f"elevation command {cmd[0]!r} not found") from e
            raise ServiceError(f"{SERVICE_SCRIPT} not found in {self.runner_home}") from e
        except OSError as e:
            raise ServiceError(f"cannot run {SERVICE_SCRIPT} {action}: {e}") from e

        output = "\n".join(filter(None, [result.stdout, result.stderr])).strip()
        if output:
            self.logger.info("Service step output", extra={"action": action, "output": output})
        if result.returncode == 0:
            return

        last_line = output.splitlines()[-1] if output else ""
        message = f"'{SERVICE_SCRIPT} {action}' exited with code {result.returncode}"
        if last_line:
            message = f"{message}: {last_line}"
        lowered = output.lower()
        if result.returncode == 126 or any(marker in lowered for marker in _PERMISSION_MARKERS):
            raise ServicePermissionError(message)
        raise ServiceError(message)
