"""Object storage for profile pictures: local filesystem or S3-compatible.

Backends are imported inside create_picture_storage() so that boto3 is only
needed for the s3 backend (install the 'storage' extra).
"""

from touristreview.application.interfaces.services import StorageProtocol
from touristreview.infrastructure.external.storage.factory import create_picture_storage

__all__ = [
    "StorageProtocol",
    "create_picture_storage",
]
