"""
Tests for the Twilio Verify client. requests.post is replaced, nothing leaves the box.
"""

import pytest
import requests

import verify_client
from verify_client import TwilioVerifyClient, VerificationError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.reason = "Reason"

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def client():
    return TwilioVerifyClient(
        account_sid="AC123", auth_token="secret", service_sid="VA456", timeout=5
    )


@pytest.fixture
def calls(monkeypatch):
    """Record requests.post calls; tests set calls.response."""

    class Recorder(list):
        response = FakeResponse(200, {"sid": "VE1", "status": "pending"})

    recorder = Recorder()

    def fake_post(url, **kwargs):
        recorder.append((url, kwargs))
        if isinstance(recorder.response, Exception):
            raise recorder.response
        return recorder.response

    monkeypatch.setattr(verify_client.requests, "post", fake_post)
    return recorder


class TestTwilioVerifyClient:

    def test_unconfigured(self, calls):
        client = TwilioVerifyClient(account_sid=None, auth_token=None, service_sid=None)

        assert not client.configured
        with pytest.raises(VerificationError, match="Twilio not configured") as info:
            client.send("+15550001111")
        assert info.value.status_code is None
        assert calls == []

    def test_send(self, client, calls):
        result = client.send("+15550001111")

        assert result == {"sid": "VE1", "status": "pending"}
        url, kwargs = calls[0]
        assert url == "https://verify.twilio.com/v2/Services/VA456/Verifications"
        assert kwargs["data"] == {"To": "+15550001111", "Channel": "sms"}
        assert kwargs["auth"] == ("AC123", "secret")
        assert kwargs["timeout"] == 5

    def test_check(self, client, calls):
        calls.response = FakeResponse(200, {"sid": "VE1", "status": "approved"})
        result = client.check("+15550001111", "123456")

        assert result == {"status": "approved"}
        url, kwargs = calls[0]
        assert url.endswith("/VA456/VerificationCheck")
        assert kwargs["data"] == {"To": "+15550001111", "Code": "123456"}

    def test_provider_error_passes_message_and_status(self, client, calls):
        calls.response = FakeResponse(
            404, {"code": 20404, "message": "The requested resource was not found", "status": 404}
        )

        with pytest.raises(VerificationError) as info:
            client.check("+15550001111", "000000")
        assert str(info.value) == "The requested resource was not found"
        assert info.value.status_code == 404

    def test_provider_error_without_json(self, client, calls):
        calls.response = FakeResponse(503, None, text="upstream down")

        with pytest.raises(VerificationError, match="upstream down") as info:
            client.send("+15550001111")
        assert info.value.status_code == 503

    def test_network_failure(self, client, calls):
        calls.response = requests.ConnectionError("boom")

        with pytest.raises(VerificationError, match="boom") as info:
            client.send("+15550001111")
        assert info.value.status_code is None
