"""Unit tests for ArtifactExporter."""

from pathlib import Path

import pytest

from tlb.export import (
    ArtifactExporter,
    ArtifactNotFoundError,
    Asset,
    Collection,
    ExportError,
    ExportPermissionDeniedError,
)


class InMemoryStorage:
    """Storage collaborator recording every call."""

    def __init__(self, granted: bool = True, fail_on: str | None = None) -> None:
        self.granted = granted
        self.fail_on = fail_on
        self.assets: list[Asset] = []
        self.collections: dict[str, list[Asset]] = {}
        self.calls: list[str] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise OSError(28, "No space left on device")

    def request_permission(self) -> bool:
        self.calls.append("request_permission")
        return self.granted

    def create_asset(self, path: Path) -> Asset:
        self._call("create_asset")
        asset = Asset(asset_id=f"asset-{len(self.assets) + 1}", path=path)
        self.assets.append(asset)
        return asset

    def get_collection(self, name: str) -> Collection | None:
        self._call("get_collection")
        if name not in self.collections:
            return None
        return Collection(name=name, path=Path("/library") / name)

    def create_collection(self, name: str, first_asset: Asset) -> Collection:
        self._call("create_collection")
        self.collections[name] = [first_asset]
        return Collection(name=name, path=Path("/library") / name)

    def add_to_collection(self, collection: Collection, assets: list[Asset]) -> None:
        self._call("add_to_collection")
        self.collections[collection.name].extend(assets)


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "timelapse.mp4"
    path.write_bytes(b"video")
    return path


class TestArtifactExporter:
    """Tests for ArtifactExporter.export()."""

    def test_creates_collection_on_first_export(self, artifact: Path) -> None:
        storage = InMemoryStorage()

        result = ArtifactExporter(storage).export(artifact)

        assert result.collection_created is True
        assert result.collection.name == "Turtle Timelapse"
        assert result.artifact_path == artifact
        assert storage.collections == {"Turtle Timelapse": [result.asset]}
        assert storage.calls == [
            "request_permission",
            "create_asset",
            "get_collection",
            "create_collection",
        ]

    def test_appends_to_existing_collection(self, artifact: Path) -> None:
        storage = InMemoryStorage()
        exporter = ArtifactExporter(storage, collection_name="Garden")

        first = exporter.export(artifact)
        second = exporter.export(artifact)

        assert first.collection_created is True
        assert second.collection_created is False
        assert storage.collections["Garden"] == [first.asset, second.asset]

    def test_missing_artifact(self, tmp_path: Path) -> None:
        storage = InMemoryStorage()

        with pytest.raises(ArtifactNotFoundError):
            ArtifactExporter(storage).export(tmp_path / "timelapse.mp4")

        assert storage.calls == []

    def test_permission_denied(self, artifact: Path) -> None:
        storage = InMemoryStorage(granted=False)

        with pytest.raises(ExportPermissionDeniedError):
            ArtifactExporter(storage).export(artifact)

        assert storage.assets == []
        assert artifact.read_bytes() == b"video"

    def test_storage_failure(self, artifact: Path) -> None:
        storage = InMemoryStorage(fail_on="create_collection")

        with pytest.raises(ExportError, match="Save error"):
            ArtifactExporter(storage).export(artifact)

        assert artifact.exists()

    def test_errors_share_base_class(self) -> None:
        assert issubclass(ExportPermissionDeniedError, ExportError)
        assert issubclass(ArtifactNotFoundError, ExportError)
        assert str(ExportPermissionDeniedError()) == (
            "Media library permission is required"
        )
