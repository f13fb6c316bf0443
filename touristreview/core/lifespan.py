"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring. Builds the Firestore client,
repositories, storage backend, map gateway and application services once
and keeps them on app.state; request handlers get them through
touristreview.api.v1.dependencies.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from touristreview.application.services import (
    PlaceResolver,
    ProfileService,
    RatingService,
    SocialGraphService,
)
from touristreview.core.config import get_settings
from touristreview.infrastructure.external.maps import NominatimSearchGateway
from touristreview.infrastructure.external.storage import create_picture_storage
from touristreview.infrastructure.firebase import create_firestore_client
from touristreview.infrastructure.firebase.repositories import (
    FirestorePlaceRepository,
    FirestoreUserRepository,
)
from touristreview.infrastructure.security import FirebaseTokenVerifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit close outbound clients.

    With FIRESTORE_ENABLED=false the services are left unset and routes
    that need them answer 503.
    """
    settings = get_settings()

    # ---- Startup ----
    storage = create_picture_storage(settings)
    gateway = NominatimSearchGateway(
        settings.map_search_base_url,
        user_agent=settings.map_search_user_agent,
        timeout=settings.map_search_timeout_seconds,
        default_limit=settings.map_search_result_limit,
    )
    app.state.storage = storage
    app.state.map_gateway = gateway

    client = create_firestore_client(settings)
    app.state.firestore_client = client
    if client is not None:
        user_repo = FirestoreUserRepository(
            client, max_attempts=settings.transaction_max_attempts
        )
        place_repo = FirestorePlaceRepository(client)
        app.state.rating_service = RatingService(place_repo, user_repo)
        app.state.social_graph_service = SocialGraphService(
            user_repo, storage, picture_prefix=settings.profile_picture_prefix
        )
        app.state.profile_service = ProfileService(
            user_repo,
            storage,
            picture_prefix=settings.profile_picture_prefix,
            max_picture_size=settings.max_profile_picture_size,
        )
        app.state.place_resolver = PlaceResolver(
            gateway,
            user_repo,
            timeout_seconds=settings.place_resolution_timeout_seconds,
            concurrency=settings.place_resolution_concurrency,
            region_span_meters=settings.place_region_span_meters,
        )
        app.state.token_verifier = FirebaseTokenVerifier(client.project_id)
    else:
        app.state.rating_service = None
        app.state.social_graph_service = None
        app.state.profile_service = None
        app.state.place_resolver = None
        app.state.token_verifier = None
    logger.info(
        "Started %s %s (storage=%s, firestore=%s)",
        settings.app_name,
        settings.app_version,
        settings.storage_backend,
        "on" if client is not None else "off",
    )

    yield

    # ---- Shutdown ----
    await gateway.aclose()
    logger.info("Map search client closed")
    if client is not None:
        await client.aclose()
        app.state.firestore_client = None
        logger.info("Firestore client closed")
