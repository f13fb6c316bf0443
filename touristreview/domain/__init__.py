"""Domain layer: entities, value objects, enums, the placemark codec and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from touristreview.domain.entities import PlaceRecord, Rating, UserAccount
from touristreview.domain.enums import (
    FriendshipStatus,
    LocationErrorKind,
    ProfileVisibility,
)
from touristreview.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DocumentStoreException,
    InvalidPlaceKeyException,
    MapGatewayException,
    ResourceNotFoundException,
    TouristReviewException,
    TransactionConflictException,
    UserAlreadyExistsException,
    ValidationException,
)
from touristreview.domain.placemark import PlaceQuery
from touristreview.domain.value_objects import Coordinate, Region

__all__ = [
    # Entities
    "PlaceRecord",
    "Rating",
    "UserAccount",
    # Enums
    "FriendshipStatus",
    "LocationErrorKind",
    "ProfileVisibility",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "DocumentStoreException",
    "InvalidPlaceKeyException",
    "MapGatewayException",
    "ResourceNotFoundException",
    "TouristReviewException",
    "TransactionConflictException",
    "UserAlreadyExistsException",
    "ValidationException",
    # Value objects
    "Coordinate",
    "PlaceQuery",
    "Region",
]
