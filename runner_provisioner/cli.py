"""Command line tool to register a self-hosted GitHub Actions runner on this host."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from aws_lambda_powertools import Logger
from pydantic import ValidationError as SettingsValidationError

from .config import Settings, split_csv
from .errors import ProvisioningError
from .prompts import collect_inputs
from .runner_controller import RunnerController

logger = Logger(service="runner-provisioner", level="WARNING", stream=sys.stderr)


# ---- Settings table ----

def format_settings(rows: List[Tuple[str, str]]) -> str:
    """Render SETTING/VALUE pairs as two aligned columns."""
    width = max([len("SETTING")] + [len(key) for key, _ in rows])
    lines = [click.style(f"{'SETTING'.ljust(width)}  VALUE", bold=True)]
    lines.extend(f"{key.ljust(width)}  {value}" for key, value in rows)
    return "\n".join(lines)


# ---- Click context ----

class Context:
    def __init__(self, settings: Settings, controller: Optional[RunnerController] = None):
        self.settings = settings
        self.logger = logger
        self._controller = controller

    @property
    def controller(self) -> RunnerController:
        if self._controller is None:
            self._controller = RunnerController(self.settings, self.logger)
        return self._controller

    def apply_overrides(self, **overrides) -> None:
        """Overwrite settings in place so services built from them see the change."""
        for key, value in overrides.items():
            if value is not None:
                setattr(self.settings, key, value)


pass_ctx = click.make_pass_decorator(Context)


def load_settings() -> Settings:
    try:
        return Settings()
    except SettingsValidationError as e:
        raise click.ClickException(f"invalid configuration: {e}")


def package_options(f):
    f = click.option('--runner-version', help='Runner release to install, e.g. 2.311.0')(f)
    f = click.option(
        '--home', type=click.Path(file_okay=False, path_type=Path),
        help='Runner home used as download cache and install directory',
    )(f)
    return f


# ---- CLI definition ----

@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--verbose', '-v', is_flag=True, help='Log progress to stderr')
@click.pass_context
def cli(ctx, verbose):
    """Register a self-hosted GitHub Actions runner on this host."""
    if ctx.obj is None:
        ctx.obj = Context(load_settings())
    logger.setLevel('INFO' if verbose else ctx.obj.settings.log_level.upper())


@cli.command('register')
@click.option('--repo', help='Repository in owner/repo format')
@click.option('--name', 'runner_name', help='Runner display name (default: host name)')
@click.option('--labels', help='Comma separated runner labels')
@package_options
@click.option('--no-service', is_flag=True, help='Configure only; do not install or start the service')
@pass_ctx
def register(ctx, repo, runner_name, labels, runner_version, home, no_service):
    """Download, register and start a runner for a repository."""
    ctx.apply_overrides(
        runner_name=runner_name,
        runner_labels=split_csv(labels) if labels is not None else None,
        runner_version=runner_version,
        runner_home=home.expanduser() if home else None,
    )
    settings = ctx.settings

    repo_value, credential = collect_inputs(
        ctx.logger, repo or settings.github_repo, settings.github_pat
    )
    try:
        result = ctx.controller.register(repo_value, credential, install_service=not no_service)
    except ProvisioningError as e:
        raise click.ClickException(e.describe()) from e

    click.secho(
        f"Runner '{result.runner_name}' registered for {result.repository}", fg='green'
    )
    if no_service:
        click.echo(f"Service not installed; start the runner with {result.runner_home / 'run.sh'}")
    else:
        click.secho(f"Runner service is {result.service_state.value}", fg='green')


@cli.command('download')
@package_options
@pass_ctx
def download(ctx, runner_version, home):
    """Fetch and unpack the runner release into the runner home."""
    ctx.apply_overrides(
        runner_version=runner_version,
        runner_home=home.expanduser() if home else None,
    )
    try:
        archive = ctx.controller.provision()
    except ProvisioningError as e:
        raise click.ClickException(e.describe()) from e
    click.echo(str(archive))


@cli.command('show-config')
@pass_ctx
def show_config(ctx):
    """Show the effective configuration."""
    settings = ctx.settings
    rows = []
    for name in type(settings).model_fields:
        value = getattr(settings, name)
        if name == 'github_pat':
            value = '**********' if value else ''
        elif isinstance(value, list):
            value = ','.join(value)
        elif value is None:
            value = ''
        rows.append((name.upper(), str(value)))
    rows.append(('API_BASE', settings.api_base))
    click.echo(format_settings(rows))


# ---- Entry point ----
if __name__ == '__main__':
    cli()
