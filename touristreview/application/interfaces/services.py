"""Service interfaces (ports) for external collaborators: map search and object storage."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from touristreview.application.dtos.place import MapPlace
    from touristreview.domain.value_objects import Region


class MapSearchGateway(Protocol):
    """Resolves a free-text query (plus optional region hint) into places."""

    async def search(
        self,
        query: str,
        region: Region | None = None,
        *,
        limit: int | None = None,
    ) -> list[MapPlace]:
        """Return matching places, best match first; empty list when nothing matches.

        Raises MapGatewayException on transport or provider failure.
        """

    async def aclose(self) -> None:
        """Release network resources."""


class StorageProtocol(Protocol):
    """Protocol for object storage backends (local, S3-compatible)."""

    async def upload(
        self,
        data: bytes,
        storage_ref: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Store data under storage_ref (overwrites). Returns ref, size, checksum."""

    def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream file content."""

    async def delete(self, storage_ref: str) -> bool:
        """Delete file. Returns True if deleted, False if not found."""

    async def exists(self, storage_ref: str) -> bool:
        """Return True if file exists."""

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Return temporary download URL (presigned for S3, token URL for local)."""
