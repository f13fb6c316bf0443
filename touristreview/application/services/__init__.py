"""Application services: ratings, social graph, profiles, place resolution."""

from touristreview.application.services.place_resolution import PlaceResolver
from touristreview.application.services.profile_service import ProfileService
from touristreview.application.services.rating_service import (
    RatingService,
    average_stars,
)
from touristreview.application.services.social_graph_service import (
    SocialGraphService,
)

__all__ = [
    "PlaceResolver",
    "ProfileService",
    "RatingService",
    "SocialGraphService",
    "average_stars",
]
