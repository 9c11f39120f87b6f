# ==============================================
# SupabaseStorageClient
# ==============================================
#
# PURPOSE:
#   StorageClient backed by a Supabase Storage bucket, spoken to over
#   its REST API with requests.
#
# ENDPOINTS:
# ----------
#   GET  {url}/storage/v1/object/{bucket}/{path}        → download
#   POST {url}/storage/v1/object/{bucket}/{path}        → upload
#        headers: Content-Type, x-upsert: "true"|"false"
#   POST {url}/storage/v1/object/list/{bucket}          → list / exists
#        json: {"prefix", "limit", "offset", "search"}
#
#   Every request carries `Authorization: Bearer <key>` and
#   `apikey: <key>`.
#
# CLASS: SupabaseStorageClient
# ----------------------------
#   Constructor:
#   ------------
#   - __init__(url, key, bucket_name="images", timeout=30.0, session=None)
#       Don't connect yet; the session is created on first use.
#
#   Methods:
#   --------
#   - connect() / close()
#   - exists / download / upload / list   (StorageClient contract)
#
# ==============================================

from typing import List, Optional
from urllib.parse import quote

import requests

from orbit_metadata.errors import StorageError
from orbit_metadata.logging_setup import get_logger
from .storage_client import StorageClient, split_path


logger = get_logger(__name__)


class SupabaseStorageClient(StorageClient):
    def __init__(
        self,
        url: str,
        key: str,
        bucket_name: str = "images",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        if not url or not key:
            raise StorageError("connect", bucket_name, "Supabase URL and key are required")
        self.url = url.rstrip("/")
        self.key = key
        self.bucket_name = bucket_name
        self.timeout = timeout
        self.session = session

    def connect(self) -> requests.Session:
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update({
                "Authorization": f"Bearer {self.key}",
                "apikey": self.key,
            })
        return self.session

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def exists(self, path: str) -> bool:
        directory, name = split_path(path)
        entries = self._list_entries("exists", path, directory, limit=100, search=name)
        return any(entry.get("name") == name for entry in entries)

    def download(self, path: str) -> bytes:
        response = self._request("download", path, "GET", self._object_url(path))
        logger.debug("downloaded object", extra={"extra": {"path": path, "bytes": len(response.content)}})
        return response.content

    def upload(self, path: str, data: bytes, content_type: str = "image/jpeg", upsert: bool = True) -> str:
        headers = {
            "Content-Type": content_type,
            "x-upsert": "true" if upsert else "false",
        }
        response = self._request("upload", path, "POST", self._object_url(path), data=data, headers=headers)
        stored = path
        try:
            key = response.json().get("Key")
        except ValueError:
            key = None
        if key:
            # Key comes back as "<bucket>/<path>"
            stored = key.split("/", 1)[1] if key.startswith(self.bucket_name + "/") else key
        logger.info("uploaded object", extra={"extra": {"path": stored, "bytes": len(data)}})
        return stored

    def list(self, directory: str = "", limit: int = 100) -> List[str]:
        entries = self._list_entries("list", directory, directory, limit=limit)
        return [entry["name"] for entry in entries if entry.get("name")]

    def _list_entries(self, operation: str, path: str, directory: str, limit: int, search: str = "") -> list:
        body = {"prefix": directory, "limit": limit, "offset": 0, "sortBy": {"column": "name", "order": "asc"}}
        if search:
            body["search"] = search
        url = f"{self.url}/storage/v1/object/list/{quote(self.bucket_name)}"
        response = self._request(operation, path, "POST", url, json=body)
        try:
            entries = response.json()
        except ValueError as exc:
            raise StorageError(operation, path, "list response is not JSON") from exc
        if not isinstance(entries, list):
            raise StorageError(operation, path, "list response is not an array")
        return entries

    def _object_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/{quote(self.bucket_name)}/{quote(path.lstrip('/'))}"

    def _request(self, operation: str, path: str, method: str, url: str, **kwargs) -> requests.Response:
        session = self.connect()
        try:
            response = session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as exc:
            detail = self._error_detail(exc.response)
            raise StorageError(operation, path, detail) from exc
        except requests.RequestException as exc:
            raise StorageError(operation, path, str(exc)) from exc
        return response

    @staticmethod
    def _error_detail(response: Optional[requests.Response]) -> str:
        if response is None:
            return "HTTP error"
        try:
            payload = response.json()
            message = payload.get("message") or payload.get("error")
        except ValueError:
            message = None
        return f"HTTP {response.status_code}: {message or response.reason}"
