"""
Bags used as plain file storage.
"""
from typing import TYPE_CHECKING, Optional

from twintag.core.common import BagNotCreatedError, logger
from twintag.core.folder import Folder
from twintag.core.view import View

if TYPE_CHECKING:
    from twintag.core.twintag import Twintag


class StorageBag:
    """A project bag with a root folder for file storage."""

    def __init__(self, twt: "Twintag", bag: Optional[View] = None):
        self.twt = twt
        self.bag = bag
        self.root_folder: Optional[Folder] = Folder(twt, bag, "/", "") if bag is not None else None

    def create(self) -> Folder:
        """Create the bag in the project and return its root folder."""
        self.bag = self.twt.project.create_bag()
        self.root_folder = Folder(self.twt, self.bag, "/", "")
        logger.info(f"Created storage bag {self.bag.qid}")
        return self.root_folder

    def delete(self) -> None:
        """
        Delete the bag along with its metadata.

        Raises:
            BagNotCreatedError: If the bag was never created
        """
        if self.bag is None:
            raise BagNotCreatedError("delete")
        self.bag.delete_project_twintag()
        logger.info(f"Deleted storage bag {self.bag.qid}")

    def __repr__(self) -> str:
        return f"StorageBag(bag={self.bag.qid if self.bag is not None else None!r})"
