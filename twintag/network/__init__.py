"""
Network components for Twintag SDK.

This package provides the transport used by every SDK resource and
the stream helpers it relies on.
"""
from twintag.network.client import (
    Client,
    http_session,
    parse_error_entries,
    LOGGED_CONTENT_TYPES,
    PARSE_ERROR_TITLE
)
from twintag.network.streams import (
    BodyCapture,
    FileBody,
    ResponseStream,
    TeeStream,
    release,
    tee
)

# Explicit export of public components
__all__ = [
    'Client',
    'http_session',
    'parse_error_entries',
    'LOGGED_CONTENT_TYPES',
    'PARSE_ERROR_TITLE',
    'BodyCapture',
    'FileBody',
    'ResponseStream',
    'TeeStream',
    'release',
    'tee'
]
