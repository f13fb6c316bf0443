"""Local filesystem storage with path validation and atomic writes."""

from __future__ import annotations

import hashlib
import json
import os
import secrets
import tempfile
from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from touristreview.infrastructure.exceptions import (
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
)
from touristreview.shared.utils.datetime import utc_now

_META_SUFFIX = ".meta.json"


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes go to a temp file that is
    renamed into place. Content type lives in a .meta.json sidecar. Download
    URLs carry short-lived tokens resolved by validate_download_token().
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
            base_url: Base URL for download links (e.g. https://api.example.com).
        """
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)
        self._download_tokens: dict[str, tuple[str, datetime]] = {}

    def _get_full_path(self, storage_ref: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / storage_ref).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_ref) from e
        if full_path == self.storage_root or full_path.name.endswith(_META_SUFFIX):
            raise StoragePermissionError(storage_ref)
        return full_path

    @staticmethod
    def _meta_path(file_path: Path) -> Path:
        return file_path.with_name(file_path.name + _META_SUFFIX)

    async def read_metadata(self, storage_ref: str) -> dict[str, Any]:
        """Sidecar metadata (content_type, size, checksum, uploaded_at) or empty dict."""
        meta_path = self._meta_path(self._get_full_path(storage_ref))
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as f:
            result = json.loads(await f.read())
        return result if isinstance(result, dict) else {}

    async def upload(
        self,
        data: bytes,
        storage_ref: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Write data atomically (temp file + rename); overwrites an existing file."""
        target_path = self._get_full_path(storage_ref)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent, prefix=".tmp_", suffix=target_path.suffix
            )
            os.close(temp_fd)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(data)
                os.chmod(temp_path, 0o640)
                os.replace(temp_path, target_path)
            finally:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
            result: dict[str, Any] = {
                "storage_ref": storage_ref,
                "checksum": hashlib.sha256(data).hexdigest(),
                "size": len(data),
                "content_type": content_type,
                "uploaded_at": utc_now().isoformat(),
                "custom": metadata or {},
            }
            async with aiofiles.open(self._meta_path(target_path), "w") as f:
                await f.write(json.dumps(result, indent=2))
            return result
        except Exception as e:
            raise StorageError(storage_ref, "upload", str(e)) from e

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream file content."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.exists():
            raise StorageNotFoundError(storage_ref)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while chunk := await f.read(self.CHUNK_SIZE):
                    yield chunk
        except Exception as e:
            raise StorageError(storage_ref, "download", str(e)) from e

    async def delete(self, storage_ref: str) -> bool:
        """Delete file and metadata. Returns True if deleted."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.exists():
            return False
        try:
            await aiofiles.os.remove(file_path)
            meta_path = self._meta_path(file_path)
            if meta_path.exists():
                await aiofiles.os.remove(meta_path)
            return True
        except Exception as e:
            raise StorageError(storage_ref, "delete", str(e)) from e

    async def exists(self, storage_ref: str) -> bool:
        """Return True if file exists."""
        try:
            return self._get_full_path(storage_ref).is_file()
        except StoragePermissionError:
            return False

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Return temporary download URL (token-based for local)."""
        if not await self.exists(storage_ref):
            raise StorageNotFoundError(storage_ref)
        self._cleanup_expired_tokens()
        token = secrets.token_urlsafe(32)
        self._download_tokens[token] = (storage_ref, utc_now() + expiration)
        path = f"/api/v1/storage/download/{token}"
        return f"{self.base_url}{path}" if self.base_url else path

    def _cleanup_expired_tokens(self) -> None:
        now = utc_now()
        for token in [t for t, (_, exp) in self._download_tokens.items() if exp <= now]:
            del self._download_tokens[token]

    def validate_download_token(self, token: str) -> str | None:
        """Return storage_ref if token valid and not expired."""
        entry = self._download_tokens.get(token)
        if entry is None:
            return None
        storage_ref, expires_at = entry
        if utc_now() > expires_at:
            del self._download_tokens[token]
            return None
        return storage_ref
