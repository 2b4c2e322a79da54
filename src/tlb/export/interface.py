"""Storage collaborator protocol for exported artifacts.

The exporter talks to persistent media storage only through this protocol,
so any gallery or library backend can be plugged in.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class Asset:
    """A file persisted by the media library."""

    asset_id: str
    path: Path


@dataclass(frozen=True)
class Collection:
    """A named group of assets (an album)."""

    name: str
    path: Path


class StorageCollaborator(Protocol):
    """Protocol for persistent media storage."""

    def request_permission(self) -> bool:
        """Ask for write access.

        Returns:
            True if granted, False if denied.
        """
        ...

    def create_asset(self, path: Path) -> Asset:
        """Persist a file as a new asset."""
        ...

    def get_collection(self, name: str) -> Collection | None:
        """Look up a collection by name."""
        ...

    def create_collection(self, name: str, first_asset: Asset) -> Collection:
        """Create a collection whose first member is ``first_asset``."""
        ...

    def add_to_collection(self, collection: Collection, assets: list[Asset]) -> None:
        """Append assets to an existing collection."""
        ...
