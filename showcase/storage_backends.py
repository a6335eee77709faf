import io
import logging
import mimetypes
from typing import Tuple, List

from django.conf import settings
from django.core.files.base import File
from django.core.files.storage import Storage, default_storage
from django.utils import timezone
from django.utils.deconstruct import deconstructible
from supabase import create_client

from .exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

_supabase_client = None


def supabase_configured() -> bool:
    return bool(getattr(settings, "SUPABASE_PROJECT_URL", ""))


def _get_client():
    global _supabase_client  # noqa: PLW0603
    if _supabase_client is None:
        url = getattr(settings, "SUPABASE_PROJECT_URL", "")
        key = getattr(settings, "SUPABASE_SERVICE_ROLE_KEY", None) or getattr(settings, "SUPABASE_ANON_KEY", "")
        if not url or not key:
            raise StorageUnavailable("SUPABASE_PROJECT_URL and a service/anon key must be set")
        _supabase_client = create_client(url, key)
    return _supabase_client


def _item_name(item) -> str:
    if isinstance(item, dict):
        return item.get("name", "")
    return getattr(item, "name", "")


@deconstructible
class SupabaseMediaStorage(Storage):
    """Django Storage backend for a public Supabase Storage bucket."""

    def __init__(self, bucket: str | None = None) -> None:
        self.bucket: str = bucket or getattr(settings, "SUPABASE_BUCKET", "media")
        if not self.bucket:
            raise StorageUnavailable("SUPABASE_BUCKET must be set")
        base = getattr(settings, "SUPABASE_PROJECT_URL", "")
        if not base:
            raise StorageUnavailable("SUPABASE_PROJECT_URL must be set to the project API URL")
        self.public_base = f"{base.rstrip('/')}/storage/v1/object/public/{self.bucket}"

    def _full_path(self, name: str) -> str:
        return name.lstrip("/")

    def _bucket(self):
        return _get_client().storage.from_(self.bucket)

    def _open(self, name: str, mode: str = "rb") -> File:
        path = self._full_path(name)
        try:
            data = self._bucket().download(path)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Supabase download failed for %s: %s", path, exc)
            raise FileNotFoundError(path) from exc
        return File(io.BytesIO(data), name=name)

    def _save(self, name: str, content: File) -> str:
        path = self._full_path(name)
        if hasattr(content, "seek"):
            content.seek(0)
        data = content.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        ctype = (
            getattr(content, "content_type", None)
            or mimetypes.guess_type(path)[0]
            or "application/octet-stream"
        )
        try:
            self._bucket().upload(path, data, file_options={"content-type": ctype, "upsert": "true"})
        except Exception as exc:  # noqa: BLE001
            logger.error("Supabase upload failed for %s: %s", path, exc)
            raise StorageUnavailable() from exc
        logger.info("Uploaded %s (%d bytes, %s)", path, len(data), ctype)
        return name

    def exists(self, name: str) -> bool:
        # Keys are generated unique per upload; never ask the backend to rename.
        return False

    def url(self, name: str) -> str:
        return f"{self.public_base}/{self._full_path(name)}"

    def delete(self, name: str) -> None:
        path = self._full_path(name)
        try:
            self._bucket().remove([path])
        except Exception as exc:  # noqa: BLE001
            logger.warning("Supabase delete failed for %s: %s", path, exc)

    def size(self, name: str) -> int:
        return 0

    def path(self, name: str) -> str:
        raise NotImplementedError("Supabase storage has no local path")

    def listdir(self, path: str) -> Tuple[List[str], List[str]]:
        files: List[str] = []
        dirs: List[str] = []
        for it in self._bucket().list(path or None):
            # Supabase returns objects with name; we can't distinguish dirs reliably
            files.append(_item_name(it))
        return dirs, files

    def get_modified_time(self, name: str):
        return timezone.now()

    def get_created_time(self, name: str):
        return timezone.now()

    def get_accessed_time(self, name: str):
        return timezone.now()


def media_storage():
    """Storage used by upload fields: Supabase when configured, else local media."""
    if supabase_configured():
        return SupabaseMediaStorage()
    return default_storage
