from __future__ import annotations

import re

from ..errors import MalformedRepositoryError, MissingCredentialError, MissingRepositoryError
from ..models import Credential, RepositoryRef

_REPO_RE = re.compile(r"([^\s/]+)/([^\s/]+)")


def parse_repository(repo: str | None) -> RepositoryRef:
    """Parse ``owner/name`` into a RepositoryRef."""
    if not repo or not repo.strip():
        raise MissingRepositoryError()
    match = _REPO_RE.fullmatch(repo)
    if match is None:
        raise MalformedRepositoryError(repo)
    return RepositoryRef(owner=match.group(1), name=match.group(2))


def validate(repo: str | None, credential: Credential | str | None) -> RepositoryRef:
    """Reject empty or malformed operator input before anything touches the network."""
    ref = parse_repository(repo)
    if not credential:
        raise MissingCredentialError()
    return ref
