from __future__ import annotations

import sys
from typing import Optional, Tuple

import click
from aws_lambda_powertools import Logger
from pydantic import SecretStr

from .models import Credential

REPO_PROMPT = "Enter your GitHub repository (format: owner/repo)"
PAT_PROMPT = "Enter your GitHub Personal Access Token (PAT)"


def prompt_repository() -> str:
    return click.prompt(REPO_PROMPT, default="", show_default=False)


def prompt_credential(logger: Logger) -> str:
    """
    Read the token without echo.

    click restores terminal echo on every exit path, including interrupts.
    Piped input has no terminal to silence, so it is read as-is after a
    warning.
    """
    if not sys.stdin.isatty():
        logger.warning("stdin is not a terminal; the access token will be read without masking")
    return click.prompt(PAT_PROMPT, default="", show_default=False, hide_input=True)


def collect_inputs(
        logger: Logger,
        repo: Optional[str] = None,
        credential: str | SecretStr | None = None,
) -> Tuple[str, Credential]:
    """Return repository and credential, prompting only for what is missing."""
    if repo is None:
        repo = prompt_repository()
    if credential is None:
        credential = prompt_credential(logger)
    return repo.strip(), Credential(credential)
