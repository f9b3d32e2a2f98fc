"""Item record store contract."""

from abc import ABC, abstractmethod
from typing import Optional

from ..state.models import Item


class ItemStore(ABC):
    """
    Key-value store for item records.

    Implementations raise ``DurableStoreError`` for infrastructure failures
    (timeouts, lost connections), ``VersionConflictError`` when a
    compare-and-set loses, and ``DuplicateIdError`` when an insert collides.
    """

    @abstractmethod
    def get(self, item_id: str) -> Optional[Item]:
        """Fetch a record, or ``None`` if the id is unknown."""

    @abstractmethod
    def put(self, item: Item, expected_version: Optional[int]) -> Item:
        """
        Write a whole record.

        Args:
            item: Record to store
            expected_version: Version the stored record must currently have;
                ``None`` means the id must not exist yet

        Returns:
            The record as stored
        """

    @abstractmethod
    def scan_by_owner(self, owner: str) -> list[Item]:
        """All records currently held by ``owner``."""

    @abstractmethod
    def scan_by_creator(self, creator: str) -> list[Item]:
        """All records minted by ``creator``."""

    @abstractmethod
    def ping(self) -> bool:
        """Lightweight liveness check."""
