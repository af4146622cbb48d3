"""
Path-oriented file access inside a bag.

```python
bag = StorageBag(twt)
root = bag.create()
docs = root.create_folder("docs")
Folder(twt, bag.bag, docs.name, docs.file_qid).write_text("hello.txt", "hello")
```
"""
import json
from typing import TYPE_CHECKING, Any, List, Optional

from twintag.core.common import BagNotCreatedError
from twintag.core.files import FILE_MODE, FOLDER_MODE, FileInfo
from twintag.core.view import View
from twintag.network.streams import ResponseStream

if TYPE_CHECKING:
    from twintag.core.twintag import Twintag


class Folder:
    """
    A folder of a bag.

    ``parent_qid`` is the qid of the folder entry whose content this object
    addresses; the root folder has an empty qid.
    """

    def __init__(self, twt: "Twintag", bag: Optional[View], name: str, parent_qid: str):
        self.twt = twt
        self.bag = bag
        self.name = name
        self.parent_qid = parent_qid

    def _require_bag(self, operation: str) -> View:
        if self.bag is None:
            raise BagNotCreatedError(operation)
        return self.bag

    def _entries(self, operation: str = "list") -> List[FileInfo]:
        return self._require_bag(operation).list(self.parent_qid or None)

    def list_files(self) -> List[FileInfo]:
        """List the files directly inside this folder."""
        return [fi for fi in self._entries() if fi.file_mode == FILE_MODE]

    def list_folders(self) -> List[FileInfo]:
        """List the sub-folders of this folder."""
        return [fi.model_copy(update={"parent": self.parent_qid})
                for fi in self._entries() if fi.file_mode == FOLDER_MODE]

    def find_file(self, name: str) -> Optional[FileInfo]:
        return next((fi for fi in self.list_files() if fi.name == name), None)

    def find_folder(self, name: str) -> Optional[FileInfo]:
        return next((fi for fi in self.list_folders() if fi.name == name), None)

    def remove_file(self, name: str) -> bool:
        """
        Delete a file of this folder by name.

        Returns:
            True if a file was deleted, False if none was found
        """
        bag = self._require_bag("remove")
        found = self.find_file(name)
        if found is None:
            return False
        bag.delete(found)
        return True

    def remove_folder(self, name: str) -> bool:
        bag = self._require_bag("remove")
        found = self.find_folder(name)
        if found is None:
            return False
        bag.delete(found)
        return True

    # Readers

    def open_stream(self, name: str) -> Optional[ResponseStream]:
        """Open the content of a file as a stream, None for an empty file."""
        return self._require_bag("read").download(name)

    def read_bytes(self, name: str) -> bytes:
        stream = self.open_stream(name)
        if stream is None:
            return b""
        with stream:
            return stream.read()

    def read_text(self, name: str, encoding: str = "utf-8") -> str:
        return self.read_bytes(name).decode(encoding)

    def read_json(self, name: str) -> Any:
        return json.loads(self.read_text(name))

    # Writers

    def write_bytes(self, name: str, data: bytes) -> FileInfo:
        """Upload ``data`` as a file of this folder."""
        return self._require_bag("write").upload(data, name=name, parent=self.parent_qid or None)

    def write_text(self, name: str, text: str, encoding: str = "utf-8") -> FileInfo:
        return self.write_bytes(name, text.encode(encoding))

    def write_json(self, name: str, value: Any) -> FileInfo:
        return self.write_text(name, json.dumps(value))

    # Folder operations

    def _find_folder_qid(self, bag: View, parent_qid: str, name: str) -> Optional[str]:
        for fi in bag.list(parent_qid or None):
            if fi.file_mode == FOLDER_MODE and fi.name == name:
                return fi.file_qid
        return None

    def resolve(self, path: str) -> Optional["Folder"]:
        """
        Resolve an absolute path, e.g. ``/docs/2024``, to a folder of the bag.

        Returns:
            The folder, or None if a path component does not exist

        Raises:
            ValueError: If the path is empty
        """
        if not path:
            raise ValueError("empty path")
        bag = self._require_bag("resolve")

        folder_qid = ""
        folder_name = "/"
        for part in (p for p in path.split("/") if p):
            found = self._find_folder_qid(bag, folder_qid, part)
            if found is None:
                return None
            folder_qid = found
            folder_name = part
        return Folder(self.twt, bag, folder_name, folder_qid)

    def create_folder(self, name: str) -> FileInfo:
        """Create a sub-folder of this folder."""
        res = self._require_bag("create folder").add_folder(name, self.parent_qid or None)
        return FileInfo.from_new_file(res, parent=self.parent_qid)

    def __repr__(self) -> str:
        return f"Folder(name={self.name!r}, qid={self.parent_qid!r})"
