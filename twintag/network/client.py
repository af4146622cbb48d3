"""
HTTP client for communication with the Twintag API.

Every resource of the SDK goes through ``Client.execute``, which returns a
``(payload, error)`` pair instead of raising for application-level failures.
"""
import json
import time
import logging
import httpx

from typing import Any, List, Optional, Tuple
from httpx import Request, Response
from pydantic import ValidationError

from twintag.config.environment import Environment, environment as default_environment
from twintag.core.common import (
    CLIENT_NAME,
    VERSION,
    BodyInput,
    ErrorKind,
    ErrorValue,
    HeaderInput,
    Result,
    TwintagError,
)
from twintag.network.streams import BodyCapture, ResponseStream, is_replayable, iter_body, tee
from twintag.utils.serializer import serialize_to_json

logger = logging.getLogger(__name__)

# Shared HTTP session; no timeout unless a call asks for one
http_session = httpx.Client(timeout=None, follow_redirects=True)

# Request bodies of these types are logged at the "body" level
LOGGED_CONTENT_TYPES = ("application/json", "application/graphql", "application/graphql+json")

PARSE_ERROR_TITLE = "failed to parse response"
PARSE_ERROR_DETAIL = "something went wrong when parsing response"


def parse_error_entries(content: bytes) -> List[ErrorValue]:
    """
    Extract structured error entries from an error response body.

    The service sends a JSON array of ``{status, title, detail}`` objects;
    an object wrapping that array under ``errors`` is accepted as well.
    Anything else yields an empty list.

    Args:
        content: Raw response body

    Returns:
        Parsed entries, possibly empty
    """
    try:
        payload = json.loads(content)
    except ValueError:
        return []
    if isinstance(payload, dict):
        payload = payload.get("errors")
    if not isinstance(payload, list):
        return []

    entries = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            entries.append(ErrorValue.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Ignoring malformed error entry {item!r}: {e}")
    return entries


def _is_logged_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() in LOGGED_CONTENT_TYPES


def _mask_header(name: str, value: str) -> str:
    if name.lower() == "authorization" and " " in value:
        scheme, token = value.split(" ", 1)
        return f"{scheme} {token[:8]}..."
    return value


def _format_headers(headers: httpx.Headers) -> str:
    return "\n".join(f"    {name}: {_mask_header(name, value)}" for name, value in headers.multi_items())


def _decode_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


class Client:
    """
    Transport shared by all resources of one logical session.

    The bearer token is read on every call and may be changed between calls,
    e.g. once a view's session data has been fetched. The environment supplies
    the log level; clients built without one share the process default.
    """

    def __init__(self, token: Optional[str] = None, environment: Optional[Environment] = None,
                 session: Optional[httpx.Client] = None):
        """
        Initialize the transport.

        Args:
            token: Bearer token, None for unauthenticated requests
            environment: Hosts and log level (defaults to the shared environment)
            session: HTTP session to send requests with (defaults to the shared one)
        """
        self.token = token
        self.environment = environment or default_environment
        self.session = session or http_session

    def prepare_headers(self, headers: Optional[HeaderInput] = None, skip_auth: bool = False) -> httpx.Headers:
        """
        Merge caller headers with authorization and client identification.

        Args:
            headers: Caller headers, appended to rather than replaced
            skip_auth: If True, no Authorization header is added

        Returns:
            Combined headers
        """
        items = list(httpx.Headers(headers).multi_items()) if headers else []

        if self.token and not skip_auth:
            items.append(("Authorization", f"Bearer {self.token}"))

        # Client identification is independent of authentication
        items.append(("X-Client-Name", CLIENT_NAME))
        items.append(("X-Client-Version", VERSION))
        return httpx.Headers(items)

    def _prepare_body(self, body: Optional[BodyInput],
                      headers: httpx.Headers) -> Tuple[Any, Optional[BodyCapture], Optional[str]]:
        """Return the content to send, the tee capture and the loggable text."""
        if body is None:
            return None, None, None

        log_body = self.environment.logs_at("body") and _is_logged_content_type(headers.get("content-type"))

        if isinstance(body, (bytes, bytearray)):
            return bytes(body), None, _decode_text(bytes(body)) if log_body else None
        if isinstance(body, str):
            return body, None, body if log_body else None

        stream = iter_body(body)
        if log_body:
            teed, capture = tee(stream)
            return teed, capture, None
        return stream, None, None

    def _log_request(self, request: Request, body_text: Optional[str]) -> None:
        env = self.environment
        if not env.logs_at("single"):
            return
        lines = [f"--> {request.method} {request.url}"]
        if env.logs_at("headers"):
            lines.append(_format_headers(request.headers))
        if env.logs_at("body") and body_text is not None:
            lines.append(f"    body: {body_text}")
        logger.info("\n".join(lines))

    def _log_response(self, request: Request, response: Response, start_time: float,
                      capture: Optional[BodyCapture], content: Optional[bytes]) -> None:
        env = self.environment
        if not env.logs_at("single"):
            return
        elapsed = int((time.monotonic() - start_time) * 1000)
        lines = [f"<-- {request.method} {request.url} {response.status_code} ({elapsed}ms)"]
        if env.logs_at("headers"):
            lines.append(_format_headers(response.headers))
        if env.logs_at("body"):
            if capture is not None:
                lines.append(f"    request body: {capture.text()}")
            if content:
                lines.append(f"    body: {_decode_text(content)}")
        logger.info("\n".join(lines))

    def execute(self, path: str, method: str = "GET", headers: Optional[HeaderInput] = None,
                body: Optional[BodyInput] = None, skip_parse: bool = False, skip_auth: bool = False,
                timeout: Optional[float] = None) -> Result:
        """
        Perform one HTTP request and normalize its outcome.

        Args:
            path: Absolute URL
            method: HTTP method
            headers: Additional headers
            body: Bytes, text, binary file-like object or iterable of chunks
            skip_parse: If True, return the raw body stream instead of decoded JSON
            skip_auth: If True, do not send the bearer token
            timeout: Optional deadline in seconds (no timeout by default)

        Returns:
            ``(payload, None)`` on success or ``(None, TwintagError)`` on an
            error response or an undecodable body

        Raises:
            httpx.HTTPError: If no response could be obtained
            TypeError: If the body is a mapping or yields chunks that are not bytes or str
        """
        method = method.upper()
        final_headers = self.prepare_headers(headers, skip_auth)
        start_time = time.monotonic()

        content, capture, body_text = self._prepare_body(body, final_headers)
        extra = {"timeout": timeout} if timeout is not None else {}
        request = self.session.build_request(method, path, headers=final_headers, content=content, **extra)
        # A one-shot body cannot be resent, so a redirect is returned as is
        send_options = {}
        if content is not None and not isinstance(content, (bytes, str)) and not is_replayable(content):
            send_options["follow_redirects"] = False

        self._log_request(request, body_text)

        try:
            response = self.session.send(request, stream=True, **send_options)
        except Exception as e:
            elapsed = int((time.monotonic() - start_time) * 1000)
            logger.error(f"{method} {path} failed after {elapsed}ms: {e}")
            raise

        handed_off = False
        try:
            if not response.is_success:
                raw = response.read()
                self._log_response(request, response, start_time, capture, raw)
                error = TwintagError.from_entries(parse_error_entries(raw), status_code=response.status_code)
                return None, error

            if skip_parse:
                stream = ResponseStream.open(response)
                self._log_response(request, response, start_time, capture, None)
                if stream is None:
                    return None, None
                handed_off = True
                return stream, None

            raw = response.read()
            self._log_response(request, response, start_time, capture, raw)
            try:
                return response.json(), None
            except ValueError as e:
                entry = ErrorValue(status=response.status_code, title=PARSE_ERROR_TITLE,
                                   detail=f"{PARSE_ERROR_DETAIL}: {e}")
                return None, TwintagError.from_entries([entry], status_code=response.status_code,
                                                       kind=ErrorKind.DECODE)
        finally:
            if not handed_off:
                response.close()

    def _json_body(self, body: Any, headers: Optional[HeaderInput],
                   data: Optional[BodyInput]) -> Tuple[Optional[HeaderInput], Optional[BodyInput]]:
        """Serialize ``body`` to JSON unless the caller already supplied ``data``."""
        if data is not None or body is None:
            return headers, data
        final_headers = httpx.Headers(headers) if headers else httpx.Headers()
        final_headers.setdefault("Content-Type", "application/json")
        return final_headers, serialize_to_json(body)

    def get(self, path: str, headers: Optional[HeaderInput] = None, skip_auth: bool = False) -> Result:
        """Perform a GET request and decode the JSON response."""
        return self.execute(path, "GET", headers=headers, skip_auth=skip_auth)

    def put(self, path: str, body: Any = None, headers: Optional[HeaderInput] = None,
            data: Optional[BodyInput] = None, skip_auth: bool = False) -> Result:
        """Perform a PUT request, sending ``body`` as JSON unless ``data`` is given."""
        headers, data = self._json_body(body, headers, data)
        return self.execute(path, "PUT", headers=headers, body=data, skip_auth=skip_auth)

    def post(self, path: str, body: Any = None, headers: Optional[HeaderInput] = None,
             data: Optional[BodyInput] = None, skip_auth: bool = False) -> Result:
        """Perform a POST request, sending ``body`` as JSON unless ``data`` is given."""
        headers, data = self._json_body(body, headers, data)
        return self.execute(path, "POST", headers=headers, body=data, skip_auth=skip_auth)

    def delete(self, path: str, body: Any = None, headers: Optional[HeaderInput] = None,
               data: Optional[BodyInput] = None, skip_auth: bool = False) -> Result:
        """
        Perform a DELETE request.

        Delete responses are never parsed: the payload is None or the raw
        body stream.
        """
        headers, data = self._json_body(body, headers, data)
        return self.execute(path, "DELETE", headers=headers, body=data, skip_parse=True,
                            skip_auth=skip_auth)

    def __repr__(self) -> str:
        return f"Client(authenticated={bool(self.token)}, environment={self.environment!r})"
