"""
General utilities for the Twintag SDK.

This package provides utilities shared by different SDK components,
such as serialization, encryption and logging.
"""
from twintag.utils.serializer import serialize_to_json, JSONEncoder
from twintag.utils.encrypter import ConfigEncrypter
from twintag.utils.logging import (
    ColoredFormatter,
    setup_logger,
    get_logger,
    enable_file_logging,
    enable_transport_logging,
    set_log_level
)

__all__ = [
    'serialize_to_json',
    'JSONEncoder',
    'ConfigEncrypter',
    'ColoredFormatter',
    'setup_logger',
    'get_logger',
    'enable_file_logging',
    'enable_transport_logging',
    'set_log_level'
]
