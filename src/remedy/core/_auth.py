# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Authentication helpers for the AR System REST API.

The server issues an AR-JWT token in exchange for a user name and password.
:class:`ARJwtCredential` wraps that exchange behind the azure-core
:class:`~azure.core.credentials.TokenCredential` protocol so that the session
code only ever asks an :class:`_AuthManager` for a token.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests
from azure.core.credentials import AccessToken, TokenCredential

from ._error_codes import SESSION_LOGIN_FAILED, http_subcode
from ._http import _HttpClient
from .errors import SessionError

logger = logging.getLogger(__name__)

# Tokens are valid for an hour unless the server is configured otherwise
DEFAULT_TOKEN_LIFETIME = 3600

# Refresh this many seconds before the token would expire
_REFRESH_MARGIN = 60


@dataclass
class _TokenPair:
    """
    Internal container for an acquired token.

    :param resource: The server the token was acquired for.
    :type resource: :class:`str`
    :param access_token: The AR-JWT token string.
    :type access_token: :class:`str`
    """

    resource: str
    access_token: str


class ARJwtCredential(TokenCredential):
    """
    User name and password credential for the AR System ``/api/jwt`` endpoints.

    :param base_url: Base URL of the REST API, e.g. ``https://remedy.example.edu``.
    :type base_url: :class:`str`
    :param username: Login name.
    :type username: :class:`str`
    :param password: Password for ``username``.
    :type password: :class:`str` | None
    :param http: HTTP client used for the login and logout calls.
    :type http: ~remedy.core._http._HttpClient | None
    :param lifetime: Assumed token lifetime in seconds.
    :type lifetime: :class:`int`
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: Optional[str] = None,
        http: Optional[_HttpClient] = None,
        lifetime: int = DEFAULT_TOKEN_LIFETIME,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.username = username
        self._password = password or ""
        self._http = http or _HttpClient()
        self.lifetime = lifetime
        self._token: Optional[AccessToken] = None

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        """
        Return a valid AR-JWT token, logging in again when the cached one is about to expire.

        :return: The token and its expiry time (epoch seconds).
        :rtype: ~azure.core.credentials.AccessToken
        :raises SessionError: If the server refuses the login or cannot be reached.
        """
        now = int(time.time())
        if self._token is not None and self._token.expires_on - _REFRESH_MARGIN > now:
            return self._token
        url = f"{self.base_url}/api/jwt/login"
        try:
            r = self._http._request(
                "post",
                url,
                data={"username": self.username, "password": self._password},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.exceptions.RequestException as exc:
            raise SessionError(
                f"Couldn't connect to {self.base_url}: {exc}",
                subcode=SESSION_LOGIN_FAILED,
                details={"server": self.base_url, "user": self.username},
            ) from exc
        if r.status_code >= 400:
            raise SessionError(
                f"Login as {self.username} to {self.base_url} failed ({r.status_code})",
                subcode=http_subcode(r.status_code),
                status_code=r.status_code,
                details={"server": self.base_url, "user": self.username},
            )
        token = (r.text or "").strip()
        if not token:
            raise SessionError(
                f"Login to {self.base_url} returned no token",
                subcode=SESSION_LOGIN_FAILED,
                details={"server": self.base_url, "user": self.username},
            )
        self._token = AccessToken(token, now + self.lifetime)
        logger.debug("logged in to %s as %s", self.base_url, self.username)
        return self._token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def revoke(self) -> None:
        """Release the current token on the server (logoff). Safe to call without a token."""
        if self._token is None:
            return
        token, self._token = self._token, None
        try:
            self._http._request(
                "post",
                f"{self.base_url}/api/jwt/logout",
                headers={"Authorization": f"AR-JWT {token.token}"},
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("logout from %s failed: %s", self.base_url, exc)


class _AuthManager:
    """
    Token helper used by the REST session to build authorization headers.

    :param credential: Credential implementing :class:`~azure.core.credentials.TokenCredential`.
    :type credential: ~azure.core.credentials.TokenCredential
    :raises TypeError: If ``credential`` does not implement the protocol.
    """

    def __init__(self, credential: TokenCredential) -> None:
        if not isinstance(credential, TokenCredential):
            raise TypeError("credential must implement azure.core.credentials.TokenCredential.")
        self.credential: TokenCredential = credential

    def _acquire_token(self, scope: str) -> _TokenPair:
        """
        Acquire a token for the given server.

        :param scope: The server base URL.
        :type scope: :class:`str`
        :return: Token pair for the server.
        :rtype: _TokenPair
        """
        token = self.credential.get_token(scope)
        return _TokenPair(resource=scope, access_token=token.token)
