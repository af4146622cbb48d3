"""
Process-wide settings of the Twintag SDK.

These operate on the default environment shared by every client that was
not given its own ``Environment``.
"""
from twintag.config.environment import environment


def set_host(host: str) -> None:
    """Set the main API host; admin and caching hosts follow it unless set."""
    environment.host = host


def set_admin_host(host: str) -> None:
    environment.admin_host = host


def set_caching_host(host: str) -> None:
    environment.caching_host = host


def set_log_level(level: str) -> str:
    """
    Set the transport log level: ``none``, ``single``, ``headers`` or ``body``.

    Returns:
        The previous level
    """
    return environment.set_log_level(level)
