"""
Virtual files: bag entries whose content is produced on request.

Construct one of the ``VirtualFile`` subclasses and upload it with
``View.upload_virtual``:

```python
link = Link("https://example.com")
view.upload_virtual(link, "My link")
```
"""
import abc
from typing import Any, Dict


class VirtualFile(abc.ABC):
    """Base class of virtual files, identified by their file mode."""

    def __init__(self, mode: int):
        self.mode = mode

    @abc.abstractmethod
    def get_definition(self) -> Dict[str, Any]:
        """Definition document stored as the file content."""


class Link(VirtualFile):
    """A virtual file representing a web link."""

    MODE = 50

    def __init__(self, url: str, target: str = "_blank"):
        """
        Construct a web link.

        Args:
            url: Link URL
            target: Browsing context; other targets than ``_blank`` may be restricted
        """
        super().__init__(self.MODE)
        self.url = url
        self.target = target or "_blank"

    def get_definition(self) -> Dict[str, Any]:
        return {
            "specversion": "1.0",
            "definition": {
                "type": "web-link",
                "data": {"url": self.url, "target": self.target},
            },
        }
