# ==============================================
# StorageClient (collaborator contract)
# ==============================================
#
# PURPOSE:
#   The codec never touches storage itself. The orchestrator asks a
#   StorageClient for image bytes before decoding and hands bytes
#   back after encoding.
#
# CLASS: StorageClient (abstract)
# -------------------------------
#   - exists(path) -> bool
#   - download(path) -> bytes
#   - upload(path, data, content_type="image/jpeg", upsert=True) -> str
#       Returns the stored path.
#   - list(directory="", limit=100) -> list[str]
#       File names directly under directory.
#   - close()
#
#   Every failure is raised as StorageError naming the operation and
#   path, with the underlying exception chained.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with client:` usage.
#
# ==============================================

from abc import ABC, abstractmethod
from typing import List


class StorageClient(ABC):
    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def download(self, path: str) -> bytes:
        ...

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str = "image/jpeg", upsert: bool = True) -> str:
        ...

    @abstractmethod
    def list(self, directory: str = "", limit: int = 100) -> List[str]:
        ...

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def split_path(path: str):
    """Split "a/b/c.jpg" into ("a/b", "c.jpg")."""
    directory, _, name = path.rpartition("/")
    return directory, name
