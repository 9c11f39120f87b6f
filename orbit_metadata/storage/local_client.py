# ==============================================
# LocalStorageClient
# ==============================================
#
# StorageClient over a directory tree. Used for offline runs and by
# the test-suite. Paths are relative to `root`; a path that resolves
# outside the root is rejected.
# ==============================================

from pathlib import Path
from typing import List, Union

from orbit_metadata.errors import StorageError
from orbit_metadata.logging_setup import get_logger
from .storage_client import StorageClient


logger = get_logger(__name__)


class LocalStorageClient(StorageClient):
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def exists(self, path: str) -> bool:
        return self._resolve("exists", path).is_file()

    def download(self, path: str) -> bytes:
        target = self._resolve("download", path)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageError("download", path, exc.strerror or str(exc)) from exc

    def upload(self, path: str, data: bytes, content_type: str = "image/jpeg", upsert: bool = True) -> str:
        target = self._resolve("upload", path)
        if target.exists() and not upsert:
            raise StorageError("upload", path, "object already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError("upload", path, exc.strerror or str(exc)) from exc
        logger.info("stored object", extra={"extra": {"path": path, "bytes": len(data), "content_type": content_type}})
        return path

    def list(self, directory: str = "", limit: int = 100) -> List[str]:
        target = self._resolve("list", directory or ".")
        if not target.is_dir():
            return []
        names = sorted(entry.name for entry in target.iterdir() if entry.is_file())
        return names[:limit]

    def _resolve(self, operation: str, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(operation, path, "path escapes the storage root")
        return target
