import json

import pytest
import requests

from smartcart.domain.errors import VisionApiError
from smartcart.services.vision_client import VisionClient

API_KEY = "AIzaTestKey"


def make_response(status, payload=None, text=""):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(payload).encode() if payload is not None else text.encode()
    resp.url = "https://vision.test/v1/images:annotate"
    return resp


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)


def test_request_carries_key_and_both_features():
    session = FakeSession(make_response(200, {"responses": [{}]}))
    client = VisionClient(api_key=API_KEY, url="https://vision.test/v1/images:annotate", session=session)

    assert client.annotate("aGVsbG8=") == {"responses": [{}]}

    call = session.calls[0]
    assert call["params"] == {"key": API_KEY}
    request = call["json"]["requests"][0]
    assert request["image"] == {"content": "aGVsbG8="}
    assert request["features"] == [
        {"type": "LABEL_DETECTION", "maxResults": 15},
        {"type": "WEB_DETECTION", "maxResults": 10},
    ]


def test_client_error_is_not_retried():
    session = FakeSession(make_response(403, {"error": {"message": "API key not valid"}}))
    client = VisionClient(api_key=API_KEY, session=session)

    with pytest.raises(VisionApiError, match="403"):
        client.annotate("aGVsbG8=")
    assert len(session.calls) == 1


def test_transient_errors_are_retried():
    session = FakeSession(
        make_response(503, text="unavailable"),
        requests.ConnectionError("reset"),
        make_response(200, {"responses": [{"labelAnnotations": []}]}),
    )
    client = VisionClient(api_key=API_KEY, session=session)

    assert client.annotate("aGVsbG8=")["responses"] == [{"labelAnnotations": []}]
    assert len(session.calls) == 3


def test_gives_up_after_three_attempts():
    session = FakeSession(*(make_response(500, text="boom") for _ in range(3)))
    client = VisionClient(api_key=API_KEY, session=session)

    with pytest.raises(VisionApiError):
        client.annotate("aGVsbG8=")
    assert len(session.calls) == 3


def test_missing_key_fails_without_request():
    session = FakeSession()
    client = VisionClient(api_key="", session=session)

    with pytest.raises(VisionApiError):
        client.annotate("aGVsbG8=")
    assert session.calls == []


def test_malformed_body_is_rejected():
    session = FakeSession(make_response(200, {"unexpected": True}))
    client = VisionClient(api_key=API_KEY, session=session)

    with pytest.raises(VisionApiError):
        client.annotate("aGVsbG8=")
