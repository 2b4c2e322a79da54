"""Filesystem-backed media library.

Layout under the library root:

    assets/<stem>-<id><suffix>          persisted copies of exported files
    collections/<name>/<asset file>     collection members (hard links)

Collection members are hard links to the asset when the filesystem allows
it, copies otherwise.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from tlb.export.interface import Asset, Collection

logger = logging.getLogger(__name__)


def _collection_dirname(name: str) -> str:
    """Map a collection name to a safe directory name."""
    cleaned = name.strip().replace(os.sep, "_")
    if os.altsep:
        cleaned = cleaned.replace(os.altsep, "_")
    return cleaned or "_"


class LocalMediaLibrary:
    """Media library stored in a local directory.

    Implements the StorageCollaborator protocol.
    """

    def __init__(self, root: Path, granted: bool = True) -> None:
        """Initialize the library.

        Args:
            root: Library root directory (created on first write).
            granted: Whether write access is granted when requested.
        """
        self.root = root
        self._granted = granted

    @property
    def assets_dir(self) -> Path:
        return self.root / "assets"

    @property
    def collections_dir(self) -> Path:
        return self.root / "collections"

    def request_permission(self) -> bool:
        logger.debug(
            "Media library permission %s for %s",
            "granted" if self._granted else "denied",
            self.root,
        )
        return self._granted

    def create_asset(self, path: Path) -> Asset:
        self.assets_dir.mkdir(parents=True, exist_ok=True)
        asset_id = f"{path.stem}-{uuid.uuid4().hex[:8]}{path.suffix}"
        destination = self.assets_dir / asset_id
        shutil.copy2(path, destination)
        logger.info("Added asset %s to library %s", asset_id, self.root)
        return Asset(asset_id=asset_id, path=destination)

    def get_collection(self, name: str) -> Collection | None:
        path = self.collections_dir / _collection_dirname(name)
        if not path.is_dir():
            return None
        return Collection(name=name, path=path)

    def create_collection(self, name: str, first_asset: Asset) -> Collection:
        path = self.collections_dir / _collection_dirname(name)
        path.mkdir(parents=True, exist_ok=False)
        collection = Collection(name=name, path=path)
        self._link(first_asset, collection)
        logger.info("Created collection %r", name)
        return collection

    def add_to_collection(self, collection: Collection, assets: list[Asset]) -> None:
        for asset in assets:
            self._link(asset, collection)

    def list_collection(self, name: str) -> list[str]:
        """Asset ids in a collection, sorted by name."""
        collection = self.get_collection(name)
        if collection is None:
            return []
        return sorted(entry.name for entry in collection.path.iterdir())

    def _link(self, asset: Asset, collection: Collection) -> None:
        target = collection.path / asset.asset_id
        try:
            os.link(asset.path, target)
        except OSError as e:
            logger.debug("Hard link failed (%s), copying %s", e, asset.asset_id)
            shutil.copy2(asset.path, target)
