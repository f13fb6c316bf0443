"""Ports (Protocols) implemented by infrastructure."""

from touristreview.application.interfaces.repositories import (
    IPlaceRepository,
    IUserRepository,
)
from touristreview.application.interfaces.services import (
    MapSearchGateway,
    StorageProtocol,
)

__all__ = [
    "IPlaceRepository",
    "IUserRepository",
    "MapSearchGateway",
    "StorageProtocol",
]
