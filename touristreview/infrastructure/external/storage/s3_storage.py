"""S3-compatible object storage (AWS S3, MinIO, etc.) with presigned download URLs."""

from __future__ import annotations

import asyncio
import hashlib
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any

import boto3
from botocore.exceptions import ClientError

from touristreview.infrastructure.exceptions import StorageError, StorageNotFoundError

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


class S3StorageService:
    """S3-compatible storage with server-side encryption and presigned URLs.

    Uses boto3 (sync) via asyncio.to_thread for async API. Compatible with
    AWS S3, MinIO, DigitalOcean Spaces.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
        """
        self.bucket = bucket
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        self._client = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            **extra,
        )

    async def upload(
        self,
        data: bytes,
        storage_ref: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Put the object (overwrites) and return ref, size and sha256."""
        checksum = hashlib.sha256(data).hexdigest()
        meta = {"sha256": checksum}
        for k, v in (metadata or {}).items():
            meta[k.lower().replace("_", "-")] = v

        def _put() -> None:
            self._client.put_object(
                Bucket=self.bucket,
                Key=storage_ref,
                Body=data,
                ContentType=content_type,
                ServerSideEncryption="AES256",
                Metadata=meta,
            )

        try:
            await asyncio.to_thread(_put)
        except ClientError as e:
            raise StorageError(storage_ref, "upload", str(e)) from e
        return {
            "storage_ref": storage_ref,
            "checksum": checksum,
            "size": len(data),
            "content_type": content_type,
        }

    async def download(self, storage_ref: str) -> AsyncIterator[bytes]:
        """Stream object body in chunks."""
        try:
            resp = await asyncio.to_thread(
                self._client.get_object, Bucket=self.bucket, Key=storage_ref
            )
        except ClientError as e:
            if e.response["Error"]["Code"] in _NOT_FOUND_CODES:
                raise StorageNotFoundError(storage_ref) from e
            raise StorageError(storage_ref, "download", str(e)) from e
        body = resp["Body"]
        try:
            while chunk := await asyncio.to_thread(body.read, self.CHUNK_SIZE):
                yield chunk
        finally:
            body.close()

    async def delete(self, storage_ref: str) -> bool:
        """Delete object. Returns False if it did not exist."""
        if not await self.exists(storage_ref):
            return False
        try:
            await asyncio.to_thread(
                self._client.delete_object, Bucket=self.bucket, Key=storage_ref
            )
        except ClientError as e:
            raise StorageError(storage_ref, "delete", str(e)) from e
        return True

    async def exists(self, storage_ref: str) -> bool:
        try:
            await asyncio.to_thread(
                self._client.head_object, Bucket=self.bucket, Key=storage_ref
            )
        except ClientError as e:
            if e.response["Error"]["Code"] in _NOT_FOUND_CODES:
                return False
            raise StorageError(storage_ref, "head", str(e)) from e
        return True

    async def generate_download_url(
        self,
        storage_ref: str,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Presigned GET URL."""
        return await asyncio.to_thread(
            self._client.generate_presigned_url,
            "get_object",
            Params={"Bucket": self.bucket, "Key": storage_ref},
            ExpiresIn=int(expiration.total_seconds()),
        )
