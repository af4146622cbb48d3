"""
File descriptions exchanged with the bag file endpoints.
"""
import io
import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# File modes used by the service
FILE_MODE = "420"
FOLDER_MODE = "493"


class FileInfo(BaseModel):
    """Details of a file or folder in a bag, using the service's field names on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    file_qid: str = Field(alias="FileQid")
    parent: Optional[str] = Field(default=None, alias="Parent")
    name: str = Field(default="", alias="Name")
    size: int = Field(default=0, alias="Size")
    mtime: Optional[datetime] = Field(default=None, alias="MTime")
    file_mode: str = Field(default="", alias="FileMode")

    @field_validator("file_mode", mode="before")
    @classmethod
    def _mode_as_string(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_folder(self) -> bool:
        return self.file_mode == FOLDER_MODE

    @classmethod
    def from_new_file(cls, data: Dict[str, Any], parent: Optional[str] = None) -> "FileInfo":
        """Build from the lower-case description returned by upload and folder calls."""
        return cls(
            file_qid=data.get("fileQid", ""),
            parent=parent,
            name=data.get("fileName", ""),
            size=data.get("size") or 0,
            mtime=data.get("modTime"),
            file_mode=data.get("fileMode", ""),
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class UploadSource:
    """A file ready to be sent: body, size, name and the headers it needs."""

    def __init__(self, body: Any, size: int, name: str):
        self.body = body
        self.size = size
        self.name = name

    @property
    def headers(self) -> Dict[str, str]:
        # Signed storage URLs reject chunked uploads
        return {"Content-Length": str(self.size)}


def stream_size(stream: Any) -> int:
    try:
        return os.fstat(stream.fileno()).st_size - stream.tell()
    except (AttributeError, OSError, io.UnsupportedOperation):
        position = stream.tell()
        stream.seek(0, io.SEEK_END)
        size = stream.tell() - position
        stream.seek(position)
        return size


@contextmanager
def upload_source(f: Union[str, Path, bytes, bytearray, Any], name: Optional[str] = None) -> Iterator[UploadSource]:
    """
    Normalize a path, bytes or binary file object for upload.

    Files opened from a path are closed when the context exits; caller
    owned file objects are left open.

    Args:
        f: Path, bytes or binary file-like object
        name: Name to store the file under (defaults to the file's own name)
    """
    if isinstance(f, (str, Path)):
        path = Path(f)
        with open(path, "rb") as fd:
            yield UploadSource(fd, path.stat().st_size, name or path.name)
    elif isinstance(f, (bytes, bytearray)):
        if not name:
            raise ValueError("a name is required when uploading raw bytes")
        yield UploadSource(bytes(f), len(f), name)
    elif hasattr(f, "read"):
        own_name = os.path.basename(getattr(f, "name", "") or "")
        if not (name or own_name):
            raise ValueError("a name is required when uploading an unnamed stream")
        yield UploadSource(f, stream_size(f), name or own_name)
    else:
        raise TypeError(f"cannot upload object of type {type(f).__name__}")
