from __future__ import annotations

from pathlib import Path
from typing import Optional

from aws_lambda_powertools import Logger

from .config import Settings
from .models import Credential, RegistrationResult, ServiceState
from .services.installer_service import RunnerInstaller
from .services.package_service import PackageProvisioner
from .services.registration_service import RegistrationClient
from .utilities.github import repository_url
from .utilities.validation import validate


class RunnerController:
    """
    Responsible for provisioning a GitHub Actions runner on this host:
    fetching the release, obtaining a registration token, configuring
    the runner and installing it as a service.

    Steps run in a fixed order and the first failure propagates untouched.
    Nothing is retried or rolled back; a downloaded archive stays cached.
    """

    def __init__(
            self,
            settings: Settings,
            logger: Logger,
            registration_client: Optional[RegistrationClient] = None,
            package_provisioner: Optional[PackageProvisioner] = None,
            installer: Optional[RunnerInstaller] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.registration_client = registration_client or RegistrationClient(settings, logger)
        self.package_provisioner = package_provisioner or PackageProvisioner(settings, logger)
        self.installer = installer or RunnerInstaller(settings, logger)

    def provision(self) -> Path:
        return self.package_provisioner.ensure_package(
            self.settings.runner_version,
            self.settings.runner_platform,
            self.settings.runner_home,
        )

    def register(
            self,
            repo: Optional[str],
            credential: Credential | str | None,
            install_service: bool = True,
    ) -> RegistrationResult:
        if not isinstance(credential, Credential):
            credential = Credential(credential)

        try:
            ref = validate(repo, credential)
            archive = self.provision()
            token = self.registration_client.request_registration_token(ref, credential)
        finally:
            credential.discard()

        runner_home = archive.parent
        result = RegistrationResult(
            repository=ref,
            runner_name=self.settings.runner_name,
            runner_home=runner_home,
            archive=archive,
        )

        self.logger.info(
            "Registration token obtained",
            extra={"repository": ref.slug, "runner_name": result.runner_name},
        )
        self.installer.configure(
            runner_home,
            repository_url(self.settings.github_url, ref.slug),
            token,
            result.runner_name,
        )

        if not install_service:
            self.logger.info("Skipping service installation")
            return result

        self.installer.install_service()
        result.service_state = ServiceState.INSTALLED
        self.installer.start_service()
        result.service_state = ServiceState.RUNNING
        self.logger.info("Runner service started", extra={"repository": ref.slug})
        return result
