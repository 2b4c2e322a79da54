"""Export of finished videos to a media library.

Public API:
    - ArtifactExporter / ExportResult: Export a finished artifact
    - StorageCollaborator / Asset / Collection: Storage protocol
    - LocalMediaLibrary: Filesystem-backed storage
    - ExportError and subclasses
"""

from tlb.export.exceptions import (
    ArtifactNotFoundError,
    ExportError,
    ExportPermissionDeniedError,
)
from tlb.export.exporter import (
    DEFAULT_COLLECTION_NAME,
    ArtifactExporter,
    ExportResult,
)
from tlb.export.interface import Asset, Collection, StorageCollaborator
from tlb.export.library import LocalMediaLibrary

__all__ = [
    "ArtifactExporter",
    "ArtifactNotFoundError",
    "Asset",
    "Collection",
    "DEFAULT_COLLECTION_NAME",
    "ExportError",
    "ExportPermissionDeniedError",
    "ExportResult",
    "LocalMediaLibrary",
    "StorageCollaborator",
]
