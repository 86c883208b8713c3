from __future__ import annotations

import http.client
import json
import urllib.request
from urllib.error import HTTPError, URLError

from aws_lambda_powertools import Logger

from ..config import Settings
from ..errors import AuthError, EmptyTokenError, ParseError, RegistrationError
from ..models import Credential, RegistrationToken, RepositoryRef
from ..utilities.github import registration_token_url, request_headers

# 404 is what GitHub answers for a private repository the token cannot see.
AUTH_FAILURE_CODES = (401, 403, 404)


def parse_token_response(body: bytes | str) -> RegistrationToken:
    """Extract ``{"token": str}`` from a registration-token response body."""
    try:
        payload = json.loads(body)
    except ValueError:
        raise ParseError("registration response is not valid JSON") from None
    if not isinstance(payload, dict) or "token" not in payload:
        raise ParseError("registration response has no 'token' field")
    token = payload["token"]
    if not isinstance(token, str):
        raise ParseError("registration response 'token' is not a string")
    if not token:
        raise EmptyTokenError()
    expires_at = payload.get("expires_at")
    return RegistrationToken(value=token, expires_at=expires_at if isinstance(expires_at, str) else None)


class RegistrationClient:
    """Exchanges a personal access token for a runner registration token."""

    def __init__(self, settings: Settings, logger: Logger) -> None:
        self.settings = settings
        self.logger = logger

    def request_registration_token(
            self, repo: RepositoryRef | str, credential: Credential
    ) -> RegistrationToken:
        """
        POST to ``/repos/{repo}/actions/runners/registration-token``.

        The credential is discarded once the request has been built, whether
        or not the call succeeds.
        """
        slug = str(repo)
        url = registration_token_url(self.settings.api_base, slug)
        try:
            req = urllib.request.Request(
                url, method="POST", headers=request_headers(credential.reveal())
            )
        finally:
            credential.discard()

        self.logger.info("Requesting registration token", extra={"repository": slug})
        try:
            with urllib.request.urlopen(req, timeout=self.settings.http_timeout) as resp:
                body = resp.read()
        except HTTPError as e:
            e.close()
            self.logger.warning(
                "Registration token request failed",
                extra={"repository": slug, "status": e.code},
            )
            if e.code in AUTH_FAILURE_CODES:
                raise AuthError(f"GitHub rejected the request ({e.code} {e.reason})") from e
            raise RegistrationError(f"GitHub API error: {e.code} {e.reason}") from e
        except URLError as e:
            raise RegistrationError(f"network error: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            raise RegistrationError(f"network error: {e!r}") from e

        token = parse_token_response(body)
        self.logger.info(
            "Received registration token",
            extra={"repository": slug, "expires_at": token.expires_at},
        )
        return token
