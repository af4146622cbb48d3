"""
Byte stream helpers for the transport.

``TeeStream`` fans a request body out to the wire and to
bounded side sinks (the request logger). ``ResponseStream`` is the live
response body handed to callers that skip JSON parsing.
"""
import logging
from typing import Any, Iterable, Iterator, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_CAPTURE_LIMIT = 64 * 1024


def _to_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise TypeError(f"request body chunks must be bytes or str, not {type(chunk).__name__}")


def _read_chunks(file: Any, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = file.read(chunk_size)
        if not chunk:
            return
        yield _to_bytes(chunk)


def _encode_chunks(chunks: Iterable[Any]) -> Iterator[bytes]:
    for chunk in chunks:
        yield _to_bytes(chunk)


class FileBody:
    """
    Seekable file body that rewinds to its starting offset on every pass,
    so a request redirected with 307/308 can be sent again.
    """

    def __init__(self, file: Any, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.file = file
        self.chunk_size = chunk_size
        self.offset = file.tell()

    def __iter__(self) -> Iterator[bytes]:
        self.file.seek(self.offset)
        return _read_chunks(self.file, self.chunk_size)


def is_replayable(stream: Any) -> bool:
    """Whether a prepared request body can be iterated more than once."""
    if isinstance(stream, TeeStream):
        return is_replayable(stream.source)
    return isinstance(stream, FileBody)


def iter_body(body: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterable[bytes]:
    """
    Iterate a request body as byte chunks.

    Seekable files give a ``FileBody``; other files and iterables give a
    one-shot generator.

    Args:
        body: Binary file-like object or iterable of byte/str chunks
        chunk_size: Read size for file-like objects

    Returns:
        Iterable of byte chunks

    Raises:
        TypeError: If ``body`` is a mapping or not iterable at all
    """
    if isinstance(body, Mapping):
        raise TypeError(f"cannot send a {type(body).__name__} as a request body, serialize it to JSON first")
    if hasattr(body, "read"):
        seekable = getattr(body, "seekable", None)
        if seekable is not None and seekable():
            return FileBody(body, chunk_size)
        return _read_chunks(body, chunk_size)
    if not isinstance(body, Iterable):
        raise TypeError(f"unsupported request body type {type(body).__name__}")
    return _encode_chunks(body)


class BodyCapture:
    """Bounded in-memory sink keeping the head of a teed body."""

    def __init__(self, limit: int = DEFAULT_CAPTURE_LIMIT):
        self.limit = limit
        self.total = 0
        self.truncated = False
        self._buffer = bytearray()

    def write(self, chunk: bytes) -> None:
        self.total += len(chunk)
        room = self.limit - len(self._buffer)
        if room > 0:
            self._buffer += chunk[:room]
        if len(chunk) > room:
            self.truncated = True

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def text(self) -> str:
        text = self._buffer.decode("utf-8", errors="replace")
        if self.truncated:
            text += f"... ({self.total} bytes total)"
        return text


class TeeStream:
    """
    Duplicate a byte stream into a transmission branch and side sinks.

    Iterating the tee pulls from the source and yields every chunk unchanged
    (the transmission branch). Each chunk of the first pass is also written
    to every sink; a replayed source is resent without being written again.
    A sink that raises is dropped and recorded in ``failed_sinks``; the
    transmission branch is never interrupted or delayed by a sink, and sinks
    are expected to bound their own memory.
    """

    def __init__(self, source: Iterable[bytes], *sinks: Any):
        self.source = source
        self._sinks: List[Any] = list(sinks)
        self.failed_sinks: List[Any] = []
        self.bytes_sent = 0
        self.passes = 0

    def add_sink(self, sink: Any) -> None:
        self._sinks.append(sink)

    def _broadcast(self, chunk: bytes) -> None:
        for sink in list(self._sinks):
            try:
                sink.write(chunk)
            except Exception as e:
                logger.debug(f"Dropping tee sink {sink!r}: {e}")
                self._sinks.remove(sink)
                self.failed_sinks.append(sink)

    def __iter__(self) -> Iterator[bytes]:
        self.passes += 1
        self.bytes_sent = 0
        for chunk in self.source:
            if self.passes == 1:
                self._broadcast(chunk)
            self.bytes_sent += len(chunk)
            yield chunk


def tee(source: Iterable[bytes], limit: int = DEFAULT_CAPTURE_LIMIT):
    """
    Tee ``source`` into a transmission stream and a bounded capture.

    Returns:
        Tuple of (TeeStream to send, BodyCapture to log)
    """
    capture = BodyCapture(limit)
    return TeeStream(source, capture), capture


class ResponseStream:
    """
    Live body of a successful response, returned in raw mode.

    The underlying response is closed once the body is exhausted, on
    ``close()``, or when used as a context manager and the block exits.

    Example:
    ```python
    stream, err = client.execute(url, skip_parse=True)
    with stream:
        for chunk in stream:
            fd.write(chunk)
    ```
    """

    def __init__(self, response: httpx.Response, chunk_size: Optional[int] = None):
        self._response = response
        self._chunks = response.iter_bytes(chunk_size)
        self._pending: Optional[bytes] = None
        self._closed = False

    @classmethod
    def open(cls, response: httpx.Response, chunk_size: Optional[int] = None) -> Optional["ResponseStream"]:
        """
        Wrap a streaming response, or close it and return None when it has no body.
        """
        stream = cls(response, chunk_size)
        first = stream._next_chunk()
        if first is None:
            return None
        stream._pending = first
        return stream

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._closed

    def _next_chunk(self) -> Optional[bytes]:
        if self._closed:
            return None
        for chunk in self._chunks:
            if chunk:
                return chunk
        self.close()
        return None

    def __iter__(self) -> Iterator[bytes]:
        while True:
            if self._pending is not None:
                chunk, self._pending = self._pending, None
            else:
                chunk = self._next_chunk()
                if chunk is None:
                    return
            yield chunk

    def read(self) -> bytes:
        """Read the remaining body and close the response."""
        return b"".join(self)

    def text(self, encoding: Optional[str] = None) -> str:
        return self.read().decode(encoding or self._response.encoding or "utf-8")

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._response.close()

    def __enter__(self) -> "ResponseStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<ResponseStream [{self.status_code}] closed={self._closed}>"


def release(payload: Any) -> None:
    """Close a raw-mode payload the caller does not intend to read."""
    if isinstance(payload, ResponseStream):
        payload.close()
