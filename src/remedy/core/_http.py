# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP plumbing for the AR System REST API.

:class:`~remedy.core._http._HttpClient` wraps the requests library with the
timeouts and headers every REST call needs. Remedy operations fail on the
first error; retries on network errors are opt-in through
:attr:`~remedy.core.config.RemedyConfig.http_retries`.
:func:`ar_error_message` pulls the server's message out of an AR System
error body.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from ..__version__ import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"remedy-ars-client/{__version__}"

# Seconds; AR System writes (and filters behind them) can be slow
WRITE_TIMEOUT = 120
READ_TIMEOUT = 30
_WRITE_METHODS = frozenset(("post", "put", "delete"))


def ar_error_message(response: requests.Response) -> Optional[str]:
    """
    Message text of an AR System error response, if it carries one.

    The server answers failures with a JSON list of status entries; the first
    entry's ``messageText`` and ``messageAppendedText`` are joined.
    """
    if not (response.text or ""):
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    if not (isinstance(payload, list) and payload and isinstance(payload[0], dict)):
        return None
    message = payload[0].get("messageText")
    appended = payload[0].get("messageAppendedText")
    if message and appended:
        return f"{message} ({appended})"
    return message or None


class _HttpClient:
    """
    Thin requests wrapper with per-method timeouts and opt-in retries.

    :param retries: Extra attempts after a network error. Default is 0.
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between attempts, doubled each time. Default is 0.5.
    :type backoff: :class:`float` | None
    :param timeout: Timeout for every request; None picks one by method.
    :type timeout: :class:`float` | None
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    :param verify: TLS verification flag or CA bundle path passed to requests.
    :type verify: :class:`bool` | :class:`str`
    """

    def __init__(
        self,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        verify: Any = True,
    ) -> None:
        self.max_attempts = 1 + max(retries or 0, 0)
        self.base_delay = 0.5 if backoff is None else backoff
        self.default_timeout: Optional[float] = timeout
        self.verify = verify
        self._session = session

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "_HttpClient":
        """Client using the ``http_*`` settings of a :class:`~remedy.core.config.RemedyConfig`."""
        return cls(
            retries=config.http_retries,
            backoff=config.http_backoff,
            timeout=config.http_timeout,
            session=session,
        )

    def _timeout_for(self, method: str) -> float:
        if self.default_timeout is not None:
            return self.default_timeout
        return WRITE_TIMEOUT if method.lower() in _WRITE_METHODS else READ_TIMEOUT

    def _send(self, method: str, url: str, kwargs: Dict[str, Any]) -> requests.Response:
        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Send one request, retrying network errors if so configured.

        HTTP error statuses are returned as they are; only exceptions raised by
        requests count as failures.

        :param method: HTTP method (``"get"``, ``"post"``, ...).
        :type method: :class:`str`
        :param url: Absolute URL.
        :type url: :class:`str`
        :param kwargs: Passed on to ``requests.request()`` or ``session.request()``.
        :return: The response.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If the last attempt fails.
        """
        kwargs.setdefault("timeout", self._timeout_for(method))
        kwargs.setdefault("verify", self.verify)
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("User-Agent", USER_AGENT)
        kwargs["headers"] = headers

        attempt = 0
        while True:
            attempt += 1
            logger.debug("%s %s (attempt %d/%d)", method.upper(), url, attempt, self.max_attempts)
            try:
                return self._send(method, url, kwargs)
            except requests.exceptions.RequestException as exc:
                if attempt >= self.max_attempts:
                    raise
                delay = self.base_delay * (2 ** (attempt - 1))
                logger.debug("%s %s failed (%s); retrying in %.1fs", method.upper(), url, exc, delay)
                time.sleep(delay)

    def close(self) -> None:
        """Close the pooled session, if any. Safe to call more than once."""
        if self._session is not None:
            self._session.close()
            self._session = None
