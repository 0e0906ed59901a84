import base64
import http.client
import io
import json
import logging
import urllib.error
from urllib.error import HTTPError

import pytest
from pydantic import BaseModel

from zendesk_api.client import Interceptors, ZendeskClient, ZendeskResponse, build_url
from zendesk_api.exceptions import (
    ZendeskAPIError,
    ZendeskDecodeError,
    ZendeskNetworkError,
    ZendeskNotFoundError,
)


class RawResponse:
    def __init__(self, body: bytes, status=200, headers=None):
        self.status = status
        self.headers = headers or {"Content-Type": "application/json"}
        self._body = body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self):
        return self._body


class EchoTransport:
    """Echoes the request body back, like a mock endpoint."""

    def __init__(self):
        self.requests = []

    def __call__(self, req):
        self.requests.append(req)
        return RawResponse(req.data or b"")


class Named(BaseModel):
    name: str


def test_build_url_joins_tenant_version_and_path():
    assert build_url("acme", "v2", "users.json") == "https://acme.zendesk.com/api/v2/users.json"
    assert build_url("acme", "v2", "/tickets/1.json") == "https://acme.zendesk.com/api/v2/tickets/1.json"


def test_post_round_trip_decodes_echoed_body():
    transport = EchoTransport()
    client = ZendeskClient("acme", transport=transport)

    assert client.post("users.json", {"name": "x"}) == {"name": "x"}
    assert client.post("users.json", {"name": "x"}, Named) == Named(name="x")

    req = transport.requests[0]
    assert req.get_method() == "POST"
    assert req.get_header("Content-type") == "application/json"
    assert json.loads(req.data) == {"name": "x"}


def test_put_sends_model_payload_without_unset_fields():
    transport = EchoTransport()
    client = ZendeskClient("acme", transport=transport)

    result = client.put("users/1.json", Named(name="y"), Named)

    assert result.name == "y"
    assert transport.requests[0].get_method() == "PUT"


def test_get_encodes_query_params_and_skips_none():
    transport = EchoTransport()
    client = ZendeskClient("acme", transport=transport)

    client.get("users/search.json", {"query": "email:a@b.com", "role": None})

    assert transport.requests[0].full_url == (
        "https://acme.zendesk.com/api/v2/users/search.json?query=email%3Aa%40b.com"
    )
    assert transport.requests[0].data is None


def test_delete_sends_no_body():
    transport = EchoTransport()
    client = ZendeskClient("acme", transport=transport)

    response = client.delete("tickets/9.json")

    assert response.status_code == 200
    assert transport.requests[0].get_method() == "DELETE"
    assert transport.requests[0].data is None


def test_auth_header_uses_api_token_credentials():
    transport = EchoTransport()
    client = ZendeskClient("acme", "agent@example.com", "secret", transport=transport)

    client.get("users/me.json")

    expected = base64.b64encode(b"agent@example.com/token:secret").decode("ascii")
    assert transport.requests[0].get_header("Authorization") == f"Basic {expected}"


def test_custom_api_version_in_url():
    transport = EchoTransport()
    client = ZendeskClient("acme", api_version="v3", transport=transport)

    client.get("tickets.json")

    assert transport.requests[0].full_url == "https://acme.zendesk.com/api/v3/tickets.json"


def test_successful_call_invokes_each_observer_once():
    transport = EchoTransport()
    requests, responses = [], []
    client = ZendeskClient(
        "acme",
        transport=transport,
        interceptors=Interceptors(on_request=requests.append, on_response=responses.append),
    )

    client.post("tickets.json", {"ticket": {"subject": "hi"}})

    assert requests == transport.requests
    assert len(responses) == 1
    assert isinstance(responses[0], ZendeskResponse)
    assert responses[0].status_code == 200


def test_default_observers_log_sizes_once_per_attempt(caplog):
    client = ZendeskClient("acme", transport=EchoTransport())

    with caplog.at_level(logging.INFO, logger="zendesk_api"):
        result = client.post("users.json", {"name": "x"})

    assert result == {"name": "x"}
    size = len(json.dumps({"name": "x"}))
    messages = [r.getMessage() for r in caplog.records]
    assert messages.count(f"Request size: {size}") == 1
    assert messages.count(f"Response size: {size}") == 1


def test_set_interceptors_without_arguments_restores_defaults():
    client = ZendeskClient("acme", transport=EchoTransport())
    client.set_interceptors(on_request=lambda req: None)

    assert client.interceptors.on_response is not None

    client.set_interceptors()

    defaults = Interceptors()
    assert client.interceptors.on_request is defaults.on_request
    assert client.interceptors.on_response is defaults.on_response


def test_observer_errors_propagate_to_caller():
    def broken(response):
        raise RuntimeError("observer blew up")

    client = ZendeskClient("acme", transport=EchoTransport())
    client.set_interceptors(on_response=broken)

    with pytest.raises(RuntimeError, match="observer blew up"):
        client.get("tickets.json")


def test_transport_failure_raises_network_error_without_observers():
    calls = []

    def failing(req):
        raise urllib.error.URLError("connection refused")

    client = ZendeskClient("acme", transport=failing)
    client.set_interceptors(on_request=calls.append, on_response=calls.append)

    with pytest.raises(ZendeskNetworkError) as excinfo:
        client.get("tickets.json")

    assert "connection refused" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, urllib.error.URLError)
    assert calls == []


def test_truncated_body_raises_network_error():
    class TruncatedResponse(RawResponse):
        def read(self):
            raise http.client.IncompleteRead(b'{"tick', 40)

    client = ZendeskClient("acme", transport=lambda req: TruncatedResponse(b""))

    with pytest.raises(ZendeskNetworkError) as excinfo:
        client.get("tickets.json")

    assert isinstance(excinfo.value.__cause__, http.client.IncompleteRead)


def test_timeout_is_passed_to_transport():
    seen = {}

    def transport(req, timeout=None):
        seen["timeout"] = timeout
        return RawResponse(b"{}")

    ZendeskClient("acme", transport=transport, timeout=7.5).get("tickets.json")

    assert seen["timeout"] == 7.5


def test_invalid_json_raises_decode_error():
    client = ZendeskClient("acme", transport=lambda req: RawResponse(b"<html>oops</html>"))

    with pytest.raises(ZendeskDecodeError) as excinfo:
        client.post("users.json", {"name": "x"})

    assert "<html>" in excinfo.value.response_body


def test_shape_mismatch_raises_decode_error():
    client = ZendeskClient("acme", transport=lambda req: RawResponse(b'{"title": "x"}'))

    with pytest.raises(ZendeskDecodeError):
        client.put("users/1.json", {"name": "x"}, Named)


def test_empty_body_decodes_to_none():
    client = ZendeskClient("acme", transport=lambda req: RawResponse(b""))

    assert client.post("tickets/1/mark_as_spam.json", {}) is None


def test_error_status_on_post_raises_api_error():
    def transport(req):
        raise HTTPError(req.full_url, 422, "Unprocessable Entity", {}, io.BytesIO(b'{"error": "RecordInvalid"}'))

    client = ZendeskClient("acme", transport=transport)

    with pytest.raises(ZendeskAPIError) as excinfo:
        client.post("users.json", {"user": {}})

    assert excinfo.value.status_code == 422
    assert "RecordInvalid" in excinfo.value.response_body


def test_get_returns_error_response_and_raise_for_status_maps_404():
    def transport(req):
        raise HTTPError(req.full_url, 404, "Not Found", {}, io.BytesIO(b'{"error": "RecordNotFound"}'))

    client = ZendeskClient("acme", transport=transport)

    response = client.get("tickets/404.json")

    assert response.status_code == 404
    assert not response.ok
    with pytest.raises(ZendeskNotFoundError):
        response.raise_for_status()


def test_response_helpers():
    response = ZendeskResponse(200, {"content-length": "12", "retry-after": " 30 "}, b"{}")

    assert response.content_length == 12
    assert response.retry_after == 30
    assert response.json() == {}
    assert repr(response) == "<ZendeskResponse [200]>"
