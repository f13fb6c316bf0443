"""Builds the profile picture store selected by STORAGE_BACKEND."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from touristreview.application.interfaces.services import StorageProtocol

if TYPE_CHECKING:
    from touristreview.core.config import Settings

logger = logging.getLogger(__name__)


def _picture_prefix(settings: Settings) -> str:
    prefix = settings.profile_picture_prefix.strip("/")
    if not prefix or ".." in prefix.split("/"):
        raise ValueError(
            f"profile_picture_prefix must be a relative folder, got {settings.profile_picture_prefix!r}"
        )
    return prefix


def create_picture_storage(settings: Settings) -> StorageProtocol:
    """Local directory or S3 bucket holding ``<prefix>/<filename>`` objects.

    The local backend also creates the prefix folder up front so the first
    upload and the download route agree on the layout.
    """
    prefix = _picture_prefix(settings)

    if settings.storage_backend == "s3":
        try:
            from touristreview.infrastructure.external.storage.s3_storage import (
                S3StorageService,
            )
        except ImportError as e:
            raise ValueError(
                "STORAGE_BACKEND=s3 needs boto3: pip install 'touristreview[storage]'"
            ) from e
        secret = settings.s3_secret_key
        storage: StorageProtocol = S3StorageService(
            bucket=settings.s3_bucket or "",
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=secret.get_secret_value() if secret else None,
        )
        logger.info("Profile pictures in s3://%s/%s", settings.s3_bucket, prefix)
        return storage

    from touristreview.infrastructure.external.storage.local_storage import (
        LocalStorageService,
    )

    local = LocalStorageService(settings.storage_root, base_url=settings.storage_base_url)
    (local.storage_root / prefix).mkdir(parents=True, exist_ok=True, mode=0o750)
    logger.info("Profile pictures in %s", local.storage_root / prefix)
    return local
