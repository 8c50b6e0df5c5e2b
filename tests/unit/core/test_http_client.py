# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from unittest.mock import Mock, patch

import pytest
import requests

from remedy.core._http import USER_AGENT, _HttpClient, ar_error_message


class TestHttpClient:
    """Timeouts, opt-in retries and session handling of _HttpClient."""

    def test_default_configuration(self):
        """No retries unless asked for."""
        client = _HttpClient()
        assert client.max_attempts == 1
        assert client.base_delay == 0.5
        assert client.default_timeout is None

    def test_custom_configuration(self):
        client = _HttpClient(retries=2, backoff=1.0, timeout=10)
        assert client.max_attempts == 3
        assert client.base_delay == 1.0
        assert client.default_timeout == 10

    @patch("requests.request")
    def test_successful_request_no_retry(self, mock_request):
        mock_request.return_value = Mock(status_code=200)

        response = _HttpClient()._request("get", "https://remedy.example.edu/api")

        assert response.status_code == 200
        assert mock_request.call_count == 1

    @patch("requests.request")
    def test_network_error_not_retried_by_default(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(requests.exceptions.ConnectionError):
            _HttpClient()._request("get", "https://remedy.example.edu/api")
        assert mock_request.call_count == 1

    @patch("requests.request")
    @patch("time.sleep")
    def test_network_error_retry_when_enabled(self, mock_sleep, mock_request):
        mock_request.side_effect = [
            requests.exceptions.ConnectionError("Network error"),
            requests.exceptions.ConnectionError("Network error"),
            Mock(status_code=200),
        ]

        response = _HttpClient(retries=2)._request("get", "https://remedy.example.edu/api")

        assert response.status_code == 200
        assert mock_request.call_count == 3
        mock_sleep.assert_any_call(0.5)
        mock_sleep.assert_any_call(1.0)

    @patch("requests.request")
    def test_http_error_status_is_returned_not_retried(self, mock_request):
        mock_request.return_value = Mock(status_code=503)

        response = _HttpClient(retries=3)._request("get", "https://remedy.example.edu/api")

        assert response.status_code == 503
        assert mock_request.call_count == 1

    @pytest.mark.parametrize("method,expected", [("get", 30), ("post", 120), ("put", 120), ("delete", 120)])
    @patch("requests.request")
    def test_per_method_default_timeout(self, mock_request, method, expected):
        mock_request.return_value = Mock(status_code=200)

        _HttpClient()._request(method, "https://remedy.example.edu/api")

        assert mock_request.call_args.kwargs["timeout"] == expected

    @patch("requests.request")
    def test_explicit_timeout_wins(self, mock_request):
        mock_request.return_value = Mock(status_code=200)

        _HttpClient(timeout=5)._request("post", "https://remedy.example.edu/api", timeout=1)

        assert mock_request.call_args.kwargs["timeout"] == 1

    def test_uses_session_when_given(self):
        session = Mock(spec=requests.Session)
        session.request.return_value = Mock(status_code=200)

        client = _HttpClient(session=session)
        client._request("get", "https://remedy.example.edu/api")

        session.request.assert_called_once()
        client.close()
        session.close.assert_called_once()
        assert client._session is None

    def test_close_without_session_is_noop(self):
        client = _HttpClient()
        client.close()
        client.close()

    @patch("requests.request")
    def test_user_agent_added_and_caller_headers_kept(self, mock_request):
        mock_request.return_value = Mock(status_code=200)

        _HttpClient()._request("get", "https://remedy.example.edu/api", headers={"Accept": "application/json"})

        headers = mock_request.call_args.kwargs["headers"]
        assert headers["User-Agent"] == USER_AGENT
        assert headers["Accept"] == "application/json"

    def test_from_config(self, test_config):
        client = _HttpClient.from_config(test_config.replace(http_retries=2, http_timeout=7))
        assert client.max_attempts == 3
        assert client.default_timeout == 7


def _error_response(text, payload=None):
    r = Mock()
    r.text = text
    if payload is None:
        r.json.side_effect = ValueError("not json")
    else:
        r.json.return_value = payload
    return r


class TestArErrorMessage:
    def test_message_and_appended_text(self):
        r = _error_response("[...]", [{"messageText": "Required field missing", "messageAppendedText": "Status"}])
        assert ar_error_message(r) == "Required field missing (Status)"

    def test_message_only(self):
        r = _error_response("[...]", [{"messageText": "Entry does not exist"}])
        assert ar_error_message(r) == "Entry does not exist"

    def test_empty_or_unstructured_body(self):
        assert ar_error_message(_error_response("")) is None
        assert ar_error_message(_error_response("<html>oops</html>")) is None
        assert ar_error_message(_error_response("{}", {"error": "x"})) is None
