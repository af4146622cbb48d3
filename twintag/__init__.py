"""
Twintag SDK.

This package provides a Python client for the Twintag bag storage service:
files and metadata of bags, structured project data, and a transport that
normalizes every response into a ``(payload, error)`` pair.
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

from twintag.core.common import VERSION
from twintag.core import (
    TwintagError,
    ErrorKind,
    ErrorValue,
    BagNotCreatedError,
    ViewNotInProjectError,
    FileInfo,
    Link,
    View,
    create_bag,
    Project,
    BagType,
    Twintag,
    Folder,
    StorageBag
)
from twintag.config.environment import Environment
from twintag.config.manager import ConfigManager
from twintag.network.client import Client
from twintag.network.streams import ResponseStream
from twintag.sdk import set_host, set_admin_host, set_caching_host, set_log_level

__all__ = [
    'TwintagError',
    'ErrorKind',
    'ErrorValue',
    'BagNotCreatedError',
    'ViewNotInProjectError',
    'FileInfo',
    'Link',
    'View',
    'create_bag',
    'Project',
    'BagType',
    'Twintag',
    'Folder',
    'StorageBag',
    'Environment',
    'ConfigManager',
    'Client',
    'ResponseStream',
    'set_host',
    'set_admin_host',
    'set_caching_host',
    'set_log_level',
    'get_view',
    '__version__'
]

__version__ = VERSION


def get_view(qid: str, token: Optional[str] = None) -> View:
    """
    Get a view by its qid.

    Args:
        qid: View qid
        token: Optional token overriding the view's own

    Returns:
        View instance
    """
    view = View(qid)
    if token:
        view.set_token(token)
    return view
