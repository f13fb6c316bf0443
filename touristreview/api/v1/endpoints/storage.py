"""Token-based downloads for the local storage backend (S3 serves presigned URLs itself)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from touristreview.api.v1.dependencies import get_storage
from touristreview.application.interfaces.services import StorageProtocol
from touristreview.infrastructure.exceptions import StorageNotFoundError
from touristreview.infrastructure.external.storage.local_storage import (
    LocalStorageService,
)

router = APIRouter()


@router.get("/download/{token}")
async def download(
    token: str, storage: Annotated[StorageProtocol, Depends(get_storage)]
) -> StreamingResponse:
    """Stream the object behind a download token; 404 when unknown or expired."""
    if not isinstance(storage, LocalStorageService):
        raise StorageNotFoundError(token)
    storage_ref = storage.validate_download_token(token)
    if storage_ref is None or not await storage.exists(storage_ref):
        raise StorageNotFoundError(token)
    meta = await storage.read_metadata(storage_ref)
    return StreamingResponse(
        storage.download(storage_ref),
        media_type=meta.get("content_type") or "application/octet-stream",
        headers={"Cache-Control": "private, max-age=300"},
    )
