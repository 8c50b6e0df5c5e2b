# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for RemedyClient context manager support."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from remedy.client import RemedyClient
from remedy.data._cache import SchemaCache

from tests.fixtures.test_data import FakeSession


class TestContextManager(unittest.TestCase):
    """Test context manager support on RemedyClient."""

    def setUp(self):
        self.session = FakeSession()
        self.patcher = patch("remedy.client.make_session", return_value=self.session)
        self.make_session = self.patcher.start()
        self.addCleanup(self.patcher.stop)

    def _client(self):
        return RemedyClient(MagicMock(count=50, wrap=80), cache=SchemaCache(root=None))

    def test_enter_creates_pooled_session_and_connects(self):
        client = self._client()
        result = client.__enter__()

        self.assertIs(result, client)
        self.assertIsInstance(client._http_session, requests.Session)
        self.assertTrue(self.session.connected)
        self.assertIs(self.make_session.call_args[1]["http_session"], client._http_session)
        client.close()

    def test_exit_disconnects_and_closes(self):
        client = self._client()
        client.__enter__()
        http_session = MagicMock(spec=requests.Session)
        client._http_session = http_session

        client.__exit__(None, None, None)

        http_session.close.assert_called_once()
        self.assertIsNone(client._http_session)
        self.assertIsNone(client._session)
        self.assertFalse(self.session.connected)

    def test_with_statement(self):
        with self._client() as client:
            self.assertTrue(self.session.connected)
            self.assertIs(client._get_session(), self.session)
        self.assertFalse(self.session.connected)

    def test_exit_on_exception(self):
        with self.assertRaises(RuntimeError):
            with self._client():
                raise RuntimeError("boom")
        self.assertFalse(self.session.connected)

    def test_close_is_idempotent(self):
        client = self._client()
        client.__enter__()
        client.close()
        client.close()
        self.assertEqual(len(self.session.calls_named("disconnect")), 1)

    def test_external_session_survives_exit(self):
        external = FakeSession().connect()
        with RemedyClient(MagicMock(), session=external, cache=SchemaCache(root=None)) as client:
            self.assertIsNone(client._http_session)
        self.assertTrue(external.connected)
