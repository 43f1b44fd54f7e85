from __future__ import annotations

import pytest
import requests

from watermap.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_get_json_success_sends_bearer_token(monkeypatch):
    client = HttpClient(token="secret", retry=RetryConfig(max_attempts=1))
    seen = {}

    def fake_request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, {"applications": []})

    monkeypatch.setattr(client.session, "request", fake_request)
    payload = client.get_json("https://example.com/api/applications")

    assert payload == {"applications": []}
    assert seen["headers"]["Authorization"] == "Bearer secret"
    assert seen["method"] == "GET"


def test_no_token_no_authorization_header(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    seen = {}

    def fake_request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, {})

    monkeypatch.setattr(client.session, "request", fake_request)
    client.get_json("https://example.com")

    assert "Authorization" not in seen["headers"]


def test_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503, {"x": 1}))

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


def test_client_error_is_not_retryable(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(401, {"error": "no"}))

    with pytest.raises(HttpRequestError) as excinfo:
        client.get_json("https://example.com")
    assert not isinstance(excinfo.value, RetryableHttpError)


def test_transport_failure_is_retryable(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    def broken(**_kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(client.session, "request", broken)

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


@pytest.mark.parametrize("response", [FakeResponse(200, raises_json=True), FakeResponse(200, [1, 2])])
def test_invalid_payload_raises(monkeypatch, response):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: response)

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com")
