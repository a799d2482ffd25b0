"""
Google Auth Transport

Implements ContactsTransport on top of google-auth's AuthorizedSession.
"""

from pathlib import Path
from typing import Mapping, Optional, Union
import logging

import requests
from google.auth import exceptions as auth_exceptions
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials

from ..config import DEFAULT_TOKEN_PATH
from ..errors import TransportError
from ..interface import ContactsTransport, TransportResponse

logger = logging.getLogger(__name__)


def load_credentials(token_path: Union[str, Path] = DEFAULT_TOKEN_PATH) -> Credentials:
    """
    Load an authorized-user token, refreshing and re-saving it if expired.

    Raises:
        TransportError: If the token is missing, unreadable or cannot be refreshed
    """
    token_path = Path(token_path)
    if not token_path.exists():
        raise TransportError(f"No credentials available at {token_path}. Complete OAuth flow first.")

    try:
        creds = Credentials.from_authorized_user_file(str(token_path))
    except (ValueError, OSError) as e:
        raise TransportError(f"Failed to load token file {token_path}: {e}") from e

    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except auth_exceptions.GoogleAuthError as e:
            raise TransportError(f"Failed to refresh token: {e}") from e
        with open(token_path, 'w') as f:
            f.write(creds.to_json())
        logger.info(f"🔄 Refreshed token: {token_path.name}")

    return creds


class AuthorizedSessionTransport(ContactsTransport):
    """Transport backed by an OAuth2-authorized requests session."""

    def __init__(self, credentials: Credentials, timeout: Optional[float] = None,
                 session: Optional[AuthorizedSession] = None):
        self._session = session or AuthorizedSession(credentials)
        self.timeout = timeout

    @classmethod
    def from_token_file(cls, token_path: Union[str, Path] = DEFAULT_TOKEN_PATH,
                        timeout: Optional[float] = None) -> "AuthorizedSessionTransport":
        transport = cls(load_credentials(token_path), timeout=timeout)
        logger.info(f"✅ Connected to Google Contacts feed ({Path(token_path).name})")
        return transport

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None
    ) -> TransportResponse:
        try:
            response = self._session.request(
                method,
                url,
                data=body,
                headers=dict(headers or {}),
                timeout=self.timeout
            )
        except (requests.RequestException, auth_exceptions.GoogleAuthError) as e:
            logger.error(f"❌ {method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e

        return TransportResponse(
            status=response.status_code,
            body=response.content,
            headers=dict(response.headers)
        )

    def close(self) -> None:
        self._session.close()
