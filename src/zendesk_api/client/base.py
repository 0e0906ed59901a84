"""Base ZendeskClient class: URL building, verb wrappers and observers."""
from dataclasses import dataclass
from email.message import Message
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar
import base64
import http.client
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request

from pydantic import BaseModel, ValidationError

from zendesk_api.exceptions import (
    ZendeskAPIError,
    ZendeskDecodeError,
    ZendeskNetworkError,
    ZendeskNotFoundError,
    ZendeskRateLimitError,
    ZendeskValidationError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_API_VERSION = "v2"


def build_url(subdomain: str, api_version: str, path: str) -> str:
    """Return the absolute endpoint URL for a path relative to the API root."""
    return f"https://{subdomain}.zendesk.com/api/{api_version}/{path.lstrip('/')}"


def require_id(value: Any, name: str) -> int:
    """Validate a resource id supplied by the caller."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ZendeskValidationError(f"{name} must be a positive integer, got {value!r}")
    return value


def to_payload(value: Any) -> Any:
    """Convert a model (or plain data) into JSON-ready data, keeping only fields that were set."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    return value


class ZendeskResponse:
    """A completed HTTP exchange with the Zendesk API."""

    def __init__(
        self,
        status_code: int,
        headers: Mapping[str, str] | Message | None,
        body: bytes,
        request: urllib.request.Request | None = None,
    ):
        if not isinstance(headers, Message):
            message = Message()
            for key, value in (headers or {}).items():
                message[key] = value
            headers = message
        self.status_code = status_code
        self.headers = headers
        self.body = body or b""
        self.request = request

    @classmethod
    def from_raw(cls, raw: Any, request: urllib.request.Request) -> "ZendeskResponse":
        status = getattr(raw, "status", None)
        if status is None:
            status = raw.getcode()
        return cls(status, getattr(raw, "headers", None), raw.read(), request)

    @classmethod
    def from_http_error(cls, error: urllib.error.HTTPError, request: urllib.request.Request) -> "ZendeskResponse":
        body = error.read() if error.fp else b""
        return cls(error.code, error.headers, body, request)

    def __repr__(self) -> str:
        return f"<ZendeskResponse [{self.status_code}]>"

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def content_length(self) -> int:
        header = self.headers.get("Content-Length")
        header = header.strip() if header else ""
        if header.isascii() and header.isdecimal():
            return int(header)
        return len(self.body)

    @property
    def retry_after(self) -> int | None:
        """Retry-After as a plain integer, or None when missing or malformed."""
        value = self.headers.get("Retry-After")
        if value is None:
            return None
        value = value.strip()
        if not (value.isascii() and value.isdecimal()):
            return None
        return int(value)

    def json(self) -> Any:
        """Parse the body as JSON; an empty body yields None."""
        if not self.body.strip():
            return None
        try:
            return json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ZendeskDecodeError(
                f"Invalid JSON in response (HTTP {self.status_code}): {e}",
                response_body=self.text,
            ) from e

    def decode(self, result_type: Type[M] | None = None) -> Any:
        """Decode the body into ``result_type`` or return the parsed JSON."""
        data = self.json()
        if result_type is None:
            return data
        try:
            return result_type.model_validate(data)
        except ValidationError as e:
            raise ZendeskDecodeError(
                f"Response does not match {result_type.__name__}: {e}",
                response_body=self.text,
            ) from e

    def raise_for_status(self) -> None:
        if self.ok:
            return
        method = self.request.get_method() if self.request is not None else "?"
        url = self.request.full_url if self.request is not None else "?"
        message = f"HTTP Error: {self.status_code} for {method} {url}"
        if self.status_code == 404:
            raise ZendeskNotFoundError(message, status_code=404, response_body=self.text)
        if self.status_code == 429:
            raise ZendeskRateLimitError(
                f"{message} (Retry-After missing or invalid)",
                status_code=429,
                response_body=self.text,
            )
        raise ZendeskAPIError(message, status_code=self.status_code, response_body=self.text)


RequestObserver = Callable[[urllib.request.Request], None]
ResponseObserver = Callable[[ZendeskResponse], None]


def log_request_size(request: urllib.request.Request) -> None:
    logger.info("Request size: %d", len(request.data or b""))


def log_response_size(response: ZendeskResponse) -> None:
    logger.info("Response size: %d", response.content_length)


@dataclass
class Interceptors:
    """Observers invoked after every HTTP attempt, retries included.

    An observer left as None is replaced by the size-logging default, so both
    slots always hold a callable.
    """

    on_request: Optional[RequestObserver] = None
    on_response: Optional[ResponseObserver] = None

    def __post_init__(self) -> None:
        if self.on_request is None:
            self.on_request = log_request_size
        if self.on_response is None:
            self.on_response = log_response_size


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds and units for waiting out HTTP 429 responses.

    ``read_unit`` and ``write_unit`` are the number of seconds one Retry-After
    unit stands for on GET and on POST/PUT/DELETE respectively. The defaults
    read GET values as seconds and the mutating verbs as minutes.
    """

    max_attempts: int = 10
    max_total_wait: float = 3600.0
    read_unit: float = 1.0
    write_unit: float = 60.0

    @classmethod
    def unified(cls, max_attempts: int = 10, max_total_wait: float = 3600.0) -> "RetryPolicy":
        """Policy that reads Retry-After as seconds for every verb."""
        return cls(max_attempts=max_attempts, max_total_wait=max_total_wait, read_unit=1.0, write_unit=1.0)

    def delay_for(self, method: str, retry_after: int) -> float:
        unit = self.read_unit if method == "GET" else self.write_unit
        return retry_after * unit


class ZendeskClientBase:
    """Base class for ZendeskClient with transport, verb wrappers and observers."""

    def __init__(
        self,
        subdomain: str,
        email: str | None = None,
        token: str | None = None,
        api_version: str = DEFAULT_API_VERSION,
        transport: Callable[..., Any] | None = None,
        interceptors: Interceptors | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the Zendesk client for one tenant.

        Args:
            subdomain: Tenant subdomain ({subdomain}.zendesk.com)
            email: Agent email used for API token auth
            token: API token
            api_version: API version path segment
            transport: urlopen-compatible callable; defaults to urllib.request.urlopen
            interceptors: Request/response observers; size-logging defaults otherwise
            retry_policy: Bounds for 429 handling
            timeout: Socket timeout passed to the transport when set
        """
        self.subdomain = subdomain
        self.api_version = api_version
        self.email = email
        self.token = token
        self.transport = transport or urllib.request.urlopen
        self.interceptors = interceptors or Interceptors()
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.auth_header = None
        if email and token:
            credentials = f"{email}/token:{token}"
            encoded_credentials = base64.b64encode(credentials.encode()).decode('ascii')
            self.auth_header = f"Basic {encoded_credentials}"

    def set_interceptors(
        self,
        on_request: RequestObserver | None = None,
        on_response: ResponseObserver | None = None,
    ) -> None:
        """Replace both observers; a missing one falls back to the size-logging default."""
        self.interceptors = Interceptors(on_request=on_request, on_response=on_response)

    def url_for(self, path: str) -> str:
        return build_url(self.subdomain, self.api_version, path)

    def _build_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> urllib.request.Request:
        url = self.url_for(path)
        query = urllib.parse.urlencode({k: v for k, v in (params or {}).items() if v is not None})
        if query:
            url = f"{url}?{query}"
        data = None
        if body is not None:
            data = json.dumps(to_payload(body)).encode("utf-8")
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header('Accept', 'application/json')
        if data is not None:
            req.add_header('Content-Type', 'application/json')
        if self.auth_header:
            req.add_header('Authorization', self.auth_header)
        return req

    def _execute(self, request: urllib.request.Request) -> ZendeskResponse:
        try:
            if self.timeout is not None:
                raw = self.transport(request, timeout=self.timeout)
            else:
                raw = self.transport(request)
            with raw:
                return ZendeskResponse.from_raw(raw, request)
        except urllib.error.HTTPError as e:
            return ZendeskResponse.from_http_error(e, request)
        except urllib.error.URLError as e:
            raise ZendeskNetworkError(f"Network Error: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            raise ZendeskNetworkError(f"Network Error: {e}") from e

    def _send(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> ZendeskResponse:
        """Perform one logical call, waiting out 429 responses within the retry policy."""
        policy = self.retry_policy
        attempts = 0
        waited = 0.0
        while True:
            request = self._build_request(method, path, params=params, body=body)
            response = self._execute(request)
            attempts += 1
            self.interceptors.on_request(request)
            self.interceptors.on_response(response)

            if response.status_code != 429:
                return response
            retry_after = response.retry_after
            if retry_after is None:
                # Not a usable rate-limit hint; hand the 429 back untouched
                return response

            delay = policy.delay_for(method, retry_after)
            if attempts >= policy.max_attempts or waited + delay > policy.max_total_wait:
                raise ZendeskRateLimitError(
                    f"Rate limit exceeded for {method} {path} after {attempts} attempts "
                    f"({waited:g}s waited)",
                    status_code=429,
                    response_body=response.text,
                    attempts=attempts,
                    waited=waited,
                )
            logger.warning("Sleeping %ss", f"{delay:g}")
            time.sleep(delay)
            waited += delay

    def _decode_result(self, response: ZendeskResponse, result_type: Type[M] | None) -> Any:
        response.raise_for_status()
        return response.decode(result_type)

    # Verb wrappers
    def get(self, path: str, params: Dict[str, Any] | None = None) -> ZendeskResponse:
        """GET a path with query parameters."""
        return self._send("GET", path, params=params)

    def post(self, path: str, body: Any, result_type: Type[M] | None = None) -> Any:
        """POST a JSON body and return the decoded result."""
        return self._decode_result(self._send("POST", path, body=body), result_type)

    def put(self, path: str, body: Any, result_type: Type[M] | None = None) -> Any:
        """PUT a JSON body and return the decoded result."""
        return self._decode_result(self._send("PUT", path, body=body), result_type)

    def delete(self, path: str) -> ZendeskResponse:
        return self._send("DELETE", path)

    def _get_json(self, path: str, result_type: Type[M], params: Dict[str, Any] | None = None) -> M:
        """GET a path, fail on error status and decode into ``result_type``."""
        return self._decode_result(self.get(path, params), result_type)
