"""Concurrent resolution of stored PlaceKeys into live map results.

Each key is decoded and searched near its stored coordinate. Lookups run
concurrently (bounded by a semaphore) under one deadline for the whole
batch; keys that do not decode, lookups that fail or return nothing, and
lookups still running at the deadline are left out of the result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from touristreview.application.dtos.place import ResolvedPlace
from touristreview.application.interfaces.repositories import IUserRepository
from touristreview.application.interfaces.services import MapSearchGateway
from touristreview.domain import placemark
from touristreview.domain.exceptions import (
    AuthorizationException,
    MapGatewayException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)


class PlaceResolver:
    """Fan-out of map lookups for lists of stored places."""

    def __init__(
        self,
        gateway: MapSearchGateway,
        user_repo: IUserRepository,
        *,
        timeout_seconds: float = 15.0,
        concurrency: int = 8,
        region_span_meters: float = 1000.0,
    ) -> None:
        self._gateway = gateway
        self._user_repo = user_repo
        self._timeout_seconds = timeout_seconds
        self._concurrency = concurrency
        self._region_span_meters = region_span_meters

    async def _lookup(
        self, place_key: str, query: placemark.PlaceQuery, limiter: asyncio.Semaphore
    ) -> ResolvedPlace | None:
        region = placemark.region_around(query.coordinate, self._region_span_meters)
        async with limiter:
            try:
                places = await self._gateway.search(query.query, region, limit=1)
            except MapGatewayException as e:
                logger.warning("Lookup failed for %r (%s): %s", place_key, e.kind.value, e.message)
                return None
        if not places:
            logger.info("No map result for %r", place_key)
            return None
        return ResolvedPlace(place_key=place_key, place=places[0])

    async def resolve_places(
        self, place_keys: Iterable[str], deadline: float | None = None
    ) -> list[ResolvedPlace]:
        """Resolve keys concurrently; deadline (seconds) bounds the whole batch.

        Duplicate keys are looked up once. Result order is unspecified.
        """
        decoded: list[tuple[str, placemark.PlaceQuery]] = []
        for key in dict.fromkeys(place_keys):
            query = placemark.decode(key)
            if query is None:
                logger.info("Skipping malformed place key %r", key)
                continue
            decoded.append((key, query))
        if not decoded:
            return []

        timeout = self._timeout_seconds if deadline is None else deadline
        limiter = asyncio.Semaphore(self._concurrency)
        tasks = [
            asyncio.create_task(self._lookup(key, query, limiter))
            for key, query in decoded
        ]
        try:
            done, pending = await asyncio.wait(tasks, timeout=timeout)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                "%d of %d place lookup(s) missed the %.1fs deadline",
                len(pending),
                len(tasks),
                timeout,
            )

        resolved: list[ResolvedPlace] = []
        for task in done:
            error = task.exception()
            if error is not None:
                logger.error("Place lookup crashed", exc_info=error)
                continue
            result = task.result()
            if result is not None:
                resolved.append(result)
        return resolved

    async def friends_rated_places(
        self, user_id: str, deadline: float | None = None
    ) -> list[ResolvedPlace]:
        """Every place any friend of user_id has rated, each resolved once."""
        user = await self._user_repo.get(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        friends = await self._user_repo.get_many(user.friends)
        keys = dict.fromkeys(key for friend in friends for key in friend.rated_places)
        return await self.resolve_places(keys, deadline)

    async def user_rated_places(
        self, viewer_id: str, owner_id: str, deadline: float | None = None
    ) -> list[ResolvedPlace]:
        """Owner's rated places; refused when the owner's profile is hidden from viewer."""
        owner = await self._user_repo.get(owner_id)
        if owner is None:
            raise ResourceNotFoundException("user", owner_id)
        if not owner.is_visible_to(viewer_id):
            raise AuthorizationException("rated_places", "read")
        return await self.resolve_places(owner.rated_places, deadline)
