from __future__ import annotations

from urllib.parse import urlparse

PUBLIC_HOST = "github.com"
PUBLIC_API = "https://api.github.com"
API_VERSION = "2022-11-28"


def api_base_for(server_url: str) -> str:
    """Return the REST API base for github.com or a GitHub Enterprise Server."""
    parsed = urlparse(server_url)
    if not parsed.hostname or parsed.hostname == PUBLIC_HOST:
        return PUBLIC_API
    return f"{parsed.scheme}://{parsed.netloc}/api/v3"


def registration_token_url(api_base: str, repo: str) -> str:
    return f"{api_base.rstrip('/')}/repos/{repo}/actions/runners/registration-token"


def repository_url(server_url: str, repo: str) -> str:
    """URL the runner is bound to, e.g. ``https://github.com/acme/widgets``."""
    return f"{server_url.rstrip('/')}/{repo}"


def request_headers(pat: str) -> dict[str, str]:
    return {
        "Authorization": f"token {pat}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
    }
