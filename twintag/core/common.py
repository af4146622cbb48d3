"""
Core definitions shared across the Twintag SDK.

This module contains common elements used throughout the SDK, including:
- Logging system configuration
- The SDK version sent to the service
- Common type definitions and aliases
- The error types returned by the transport and raised by the resource layer

Every other module of the SDK builds on these definitions, so they are
kept free of imports from the rest of the package.
"""
import enum
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

# Global logging configuration
logger = logging.getLogger("twintag")
logger.addHandler(logging.NullHandler())

# Version reported in the X-Client-Version header
VERSION = "1.0.0"

# Identifier reported in the X-Client-Name header
CLIENT_NAME = "twintag.py"

# Type aliases to improve readability and maintenance
HeaderInput = Union[Mapping[str, str], Sequence[Tuple[str, str]]]
"""
Headers accepted by the transport: a mapping or a list of name/value pairs.

Example:
```python
headers: HeaderInput = {"Content-Type": "application/json"}
headers: HeaderInput = [("Accept", "application/json"), ("Accept", "text/plain")]
```
"""

BodyInput = Union[bytes, str, Iterable[bytes], Any]
"""
Request bodies accepted by the transport: bytes, text, an iterable of byte
chunks or a binary file-like object.
"""

JSONDict = Dict[str, Any]


class ErrorKind(str, enum.Enum):
    """Which branch of the response classification produced an error."""

    RESPONSE = "response"
    DECODE = "decode"


class ErrorValue(BaseModel):
    """
    One structured error entry as sent by the service.

    Error responses carry a JSON array of these entries:
    ```json
    [{"status": 422, "title": "Bad", "detail": "field X invalid"}]
    ```
    """

    status: int = 0
    title: str = ""
    detail: str = ""


# SDK exceptions
class TwintagError(Exception):
    """
    Base error for the Twintag SDK.

    The transport returns it in the error slot of its ``(payload, error)``
    result; the resource layer raises it after attaching call-site context.
    The underlying structured entries are kept in ``errors`` and survive
    any later ``set_message`` call.

    Example:
    ```python
    data, err = client.get(url)
    if err:
        err.set_message("failed to get twintag data")
        raise err
    ```
    """

    GENERIC_MESSAGE = "Failed to perform the request"
    GENERIC_NAME = "Twintag Error"

    def __init__(self, message: str, errors: Optional[Iterable[ErrorValue]] = None,
                 name: Optional[str] = None, stack: Optional[str] = None,
                 kind: ErrorKind = ErrorKind.RESPONSE, status_code: Optional[int] = None):
        """
        Initialize a TwintagError.

        Args:
            message: Human readable message
            errors: Structured entries reported by the service
            name: Short error name, empty when not given
            stack: Optional raw trace string
            kind: Classification branch that produced the error
            status_code: HTTP status of the response, when there was one
        """
        self.message = message
        self.errors: List[ErrorValue] = list(errors or [])
        self.name = name or ""
        self.stack = stack
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_entries(cls, entries: Sequence[ErrorValue], status_code: Optional[int] = None,
                     kind: ErrorKind = ErrorKind.RESPONSE) -> "TwintagError":
        """
        Build the wrapping error for a list of structured entries.

        The first entry provides the message (its detail, or its title when
        the detail is empty) and the name. Without entries the generic
        message and name are used.
        """
        if entries:
            first = entries[0]
            return cls(first.detail or first.title or cls.GENERIC_MESSAGE, entries,
                       name=first.title, kind=kind, status_code=status_code)
        return cls(cls.GENERIC_MESSAGE, [], name=cls.GENERIC_NAME, kind=kind,
                   status_code=status_code)

    def set_message(self, message: str) -> None:
        """Overwrite the message, keeping the structured entries."""
        self.message = message
        self.args = (message,)

    @property
    def status(self) -> int:
        """Status of the first structured entry, or the HTTP status."""
        if self.errors and self.errors[0].status:
            return self.errors[0].status
        return self.status_code or 0

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(message={self.message!r}, name={self.name!r}, "
                f"kind={self.kind.value!r}, errors={len(self.errors)})")


class BagNotCreatedError(TwintagError):
    """Raised when a storage bag operation runs before the bag exists."""

    def __init__(self, operation: str):
        super().__init__(f"bag {operation}; bag not created", name="BagNotCreated")


class ViewNotInProjectError(TwintagError):
    """Raised when a project-only operation is used on an untagged view."""

    def __init__(self):
        super().__init__("view not tagged to any project", name="ViewNotInProject")


Result = Tuple[Any, Optional[TwintagError]]
"""
The ``(payload, error)`` pair returned by every transport operation.
Exactly one side is meaningful: on error the payload is ``None``.
"""
