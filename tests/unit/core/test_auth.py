# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import time
import unittest
from unittest.mock import MagicMock, Mock

import requests
from azure.core.credentials import AccessToken, TokenCredential

from remedy.core._auth import ARJwtCredential, _AuthManager
from remedy.core._error_codes import SESSION_LOGIN_FAILED
from remedy.core.errors import SessionError


class TestARJwtCredential(unittest.TestCase):
    """Login, token reuse and logout of the AR-JWT credential."""

    def setUp(self):
        self.http = MagicMock()
        self.http._request.return_value = Mock(status_code=200, text="jwt-token-123")
        self.cred = ARJwtCredential("https://remedy.example.edu/", "svc", "pw", http=self.http)

    def test_is_token_credential(self):
        self.assertIsInstance(self.cred, TokenCredential)

    def test_get_token_posts_login_form(self):
        token = self.cred.get_token("https://remedy.example.edu")

        self.assertEqual(token.token, "jwt-token-123")
        self.assertGreater(token.expires_on, time.time())
        args, kwargs = self.http._request.call_args
        self.assertEqual(args, ("post", "https://remedy.example.edu/api/jwt/login"))
        self.assertEqual(kwargs["data"], {"username": "svc", "password": "pw"})

    def test_token_reused_until_expiry(self):
        self.cred.get_token()
        self.cred.get_token()
        self.assertEqual(self.http._request.call_count, 1)

    def test_expiring_token_refreshed(self):
        self.cred._token = AccessToken("old", int(time.time()) + 10)
        token = self.cred.get_token()
        self.assertEqual(token.token, "jwt-token-123")

    def test_login_refused(self):
        self.http._request.return_value = Mock(status_code=401, text="")
        with self.assertRaises(SessionError) as ctx:
            self.cred.get_token()
        self.assertEqual(ctx.exception.subcode, "http_401")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_connection_failure(self):
        self.http._request.side_effect = requests.exceptions.ConnectionError("unreachable")
        with self.assertRaises(SessionError) as ctx:
            self.cred.get_token()
        self.assertEqual(ctx.exception.subcode, SESSION_LOGIN_FAILED)

    def test_empty_token(self):
        self.http._request.return_value = Mock(status_code=200, text="  ")
        with self.assertRaises(SessionError):
            self.cred.get_token()

    def test_revoke_posts_logout(self):
        self.cred.get_token()
        self.cred.revoke()

        self.assertFalse(self.cred.has_token)
        args, kwargs = self.http._request.call_args
        self.assertEqual(args, ("post", "https://remedy.example.edu/api/jwt/logout"))
        self.assertEqual(kwargs["headers"]["Authorization"], "AR-JWT jwt-token-123")

    def test_revoke_failure_is_logged_not_raised(self):
        self.cred.get_token()
        self.http._request.side_effect = requests.exceptions.ConnectionError("gone")
        with self.assertLogs("remedy.core._auth", level="WARNING"):
            self.cred.revoke()
        self.assertFalse(self.cred.has_token)

    def test_revoke_without_token(self):
        self.cred.revoke()
        self.http._request.assert_not_called()


class TestAuthManager(unittest.TestCase):
    def test_rejects_non_credential(self):
        with self.assertRaises(TypeError):
            _AuthManager(object())

    def test_acquire_token(self):
        cred = MagicMock(spec=TokenCredential)
        cred.get_token.return_value = AccessToken("abc", 0)

        pair = _AuthManager(cred)._acquire_token("https://remedy.example.edu")

        self.assertEqual(pair.resource, "https://remedy.example.edu")
        self.assertEqual(pair.access_token, "abc")
        cred.get_token.assert_called_once_with("https://remedy.example.edu")
