"""Artifact exporter.

Hands a finished video to the media library and files it under a named
collection. The artifact on local storage is never moved, modified or
deleted, whatever the export outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from tlb.export.exceptions import (
    ArtifactNotFoundError,
    ExportError,
    ExportPermissionDeniedError,
)
from tlb.export.interface import Asset, Collection, StorageCollaborator

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "Turtle Timelapse"


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""

    artifact_path: Path
    asset: Asset
    collection: Collection
    collection_created: bool


class ArtifactExporter:
    """Exports finished artifacts to a storage collaborator."""

    def __init__(
        self,
        storage: StorageCollaborator,
        collection_name: str = DEFAULT_COLLECTION_NAME,
    ) -> None:
        self._storage = storage
        self._collection_name = collection_name

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def export(self, artifact_path: Path) -> ExportResult:
        """Persist an artifact and add it to the collection.

        The collection is created with the artifact as its first member if
        it does not exist yet; otherwise the artifact is appended.

        Args:
            artifact_path: Path of the finished video.

        Returns:
            ExportResult describing the persisted asset.

        Raises:
            ArtifactNotFoundError: If the artifact file does not exist.
            ExportPermissionDeniedError: If the library denies access.
            ExportError: If the library fails while storing the asset.
        """
        if not artifact_path.is_file():
            raise ArtifactNotFoundError(artifact_path)

        if not self._storage.request_permission():
            logger.warning("Export of %s denied by media library", artifact_path)
            raise ExportPermissionDeniedError()

        try:
            asset = self._storage.create_asset(artifact_path)
            collection = self._storage.get_collection(self._collection_name)
            created = collection is None
            if collection is None:
                collection = self._storage.create_collection(
                    self._collection_name, asset
                )
            else:
                self._storage.add_to_collection(collection, [asset])
        except OSError as e:
            logger.error("Export of %s failed: %s", artifact_path, e)
            raise ExportError(f"Save error: {e}") from e

        logger.info(
            "Exported %s as %s to collection %r",
            artifact_path,
            asset.asset_id,
            collection.name,
        )
        return ExportResult(
            artifact_path=artifact_path,
            asset=asset,
            collection=collection,
            collection_created=created,
        )
