"""
Host and verbosity configuration for the Twintag SDK.

An ``Environment`` is handed to every transport client. The module-level
``environment`` instance is the process default shared by all clients that
are not given one explicitly, so changing its log level affects them all.
"""
import os
import logging
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

LOG_LEVELS = ("none", "single", "headers", "body")

DEFAULT_HOST = "https://twintag.io"
ADMIN_SUBDOMAIN = "admin."
CACHING_SUBDOMAIN = "cache."


def _validate_log_level(level: str) -> str:
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid log level {level!r}; expected one of {', '.join(LOG_LEVELS)}")
    return level


def _derive_host(host: str, subdomain: str) -> str:
    base = urlsplit(host)
    return f"{base.scheme}://{subdomain}{base.netloc}"


class Environment:
    """
    Hosts and transport log level.

    The admin and caching hosts follow the main host (``admin.<host>`` and
    ``cache.<host>``) until they are set explicitly.
    """

    def __init__(self, host: str = DEFAULT_HOST, admin_host: Optional[str] = None,
                 caching_host: Optional[str] = None, log_level: str = "none"):
        self._host = host.rstrip("/")
        self._admin_host = admin_host.rstrip("/") if admin_host else None
        self._caching_host = caching_host.rstrip("/") if caching_host else None
        self._log_level = _validate_log_level(log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Environment":
        """
        Build an environment from ``TWINTAG_*`` variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Configured environment
        """
        environ = os.environ if environ is None else environ
        return cls(
            host=environ.get("TWINTAG_HOST") or DEFAULT_HOST,
            admin_host=environ.get("TWINTAG_ADMIN_HOST") or None,
            caching_host=environ.get("TWINTAG_CACHING_HOST") or None,
            log_level=environ.get("TWINTAG_LOG_LEVEL") or "none",
        )

    @property
    def host(self) -> str:
        return self._host

    @host.setter
    def host(self, host: str) -> None:
        self._host = host.rstrip("/")

    @property
    def admin_host(self) -> str:
        return self._admin_host or _derive_host(self._host, ADMIN_SUBDOMAIN)

    @admin_host.setter
    def admin_host(self, admin_host: str) -> None:
        self._admin_host = admin_host.rstrip("/") if admin_host else None

    @property
    def caching_host(self) -> str:
        return self._caching_host or _derive_host(self._host, CACHING_SUBDOMAIN)

    @caching_host.setter
    def caching_host(self, caching_host: str) -> None:
        self._caching_host = caching_host.rstrip("/") if caching_host else None

    @property
    def log_level(self) -> str:
        return self._log_level

    @log_level.setter
    def log_level(self, level: str) -> None:
        self._log_level = _validate_log_level(level)

    def set_log_level(self, level: str) -> str:
        """
        Change the transport log level.

        Args:
            level: One of ``none``, ``single``, ``headers``, ``body``

        Returns:
            The previous level, so callers can restore it
        """
        previous = self._log_level
        self.log_level = level
        logger.debug(f"Transport log level changed from {previous} to {level}")
        return previous

    def logs_at(self, level: str) -> bool:
        """True when the configured level is ``level`` or more verbose."""
        return LOG_LEVELS.index(self._log_level) >= LOG_LEVELS.index(_validate_log_level(level))

    @contextmanager
    def log_level_override(self, level: str) -> Iterator["Environment"]:
        """
        Temporarily apply a log level, restoring the previous one on exit.

        Example:
        ```python
        with environment.log_level_override("none"):
            client.get(url)
        ```
        """
        previous = self.set_log_level(level)
        try:
            yield self
        finally:
            self._log_level = previous

    def __repr__(self) -> str:
        return (f"Environment(host={self.host!r}, admin_host={self.admin_host!r}, "
                f"caching_host={self.caching_host!r}, log_level={self.log_level!r})")


def build_default_environment(environ: Optional[Mapping[str, str]] = None) -> Environment:
    """
    Build the process default environment from ``TWINTAG_*`` variables.

    An unknown ``TWINTAG_LOG_LEVEL`` is reported and replaced by ``none``
    so that importing the SDK never fails on it.
    """
    environ = os.environ if environ is None else environ
    try:
        return Environment.from_env(environ)
    except ValueError as e:
        logger.warning(f"Ignoring TWINTAG_LOG_LEVEL: {e}")
        return Environment.from_env({**environ, "TWINTAG_LOG_LEVEL": "none"})


# Default environment shared by clients created without one
environment = build_default_environment()
