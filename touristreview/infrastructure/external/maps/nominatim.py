"""Map search over a Nominatim-compatible geocoding API (httpx).

Results become MapPlace values whose place_key is built with the placemark
codec, so a place found here always produces the same key for the same
name/address/coordinate. Characters the key format reserves ('@', '<', '>')
are stripped from names and addresses.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from touristreview.application.dtos.place import MapPlace
from touristreview.domain.enums import LocationErrorKind
from touristreview.domain.exceptions import MapGatewayException
from touristreview.domain.value_objects import Coordinate, Region

logger = logging.getLogger(__name__)

_RESERVED_RE = re.compile(r"[@<>]")


def _clean(text: str) -> str:
    return " ".join(_RESERVED_RE.sub(" ", text).split())


def _to_place(item: dict[str, Any]) -> MapPlace | None:
    try:
        coordinate = Coordinate(float(item["lat"]), float(item["lon"]))
    except (KeyError, TypeError, ValueError):
        return None
    display = _clean(item.get("display_name") or "")
    name = _clean(item.get("name") or "") or display.split(",")[0].strip()
    if not name:
        return None
    address = display
    if address.startswith(name):
        address = address[len(name):].lstrip(" ,")
    osm_type, osm_id = item.get("osm_type"), item.get("osm_id")
    provider_id = f"{osm_type}:{osm_id}" if osm_type and osm_id is not None else None
    return MapPlace(
        name=name,
        address=address,
        coordinate=coordinate,
        provider_place_id=provider_id,
        category=item.get("type") or item.get("category"),
    )


class NominatimSearchGateway:
    """MapSearchGateway backed by /search of a Nominatim server."""

    def __init__(
        self,
        base_url: str,
        *,
        user_agent: str,
        timeout: float = 10.0,
        default_limit: int = 10,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._default_limit = default_limit
        self._http = http_client if http_client is not None else httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def search(
        self,
        query: str,
        region: Region | None = None,
        *,
        limit: int | None = None,
    ) -> list[MapPlace]:
        """Free-text search, biased towards region when given (not bounded to it)."""
        params: dict[str, Any] = {
            "q": query,
            "format": "jsonv2",
            "limit": limit or self._default_limit,
        }
        if region is not None:
            params["viewbox"] = ",".join(f"{v:.6f}" for v in region.bounds)
        try:
            resp = await self._http.get("/search", params=params)
        except httpx.TimeoutException as e:
            raise MapGatewayException(LocationErrorKind.NETWORK, "Map search timed out") from e
        except httpx.TransportError as e:
            raise MapGatewayException(LocationErrorKind.NETWORK) from e
        if resp.status_code in (401, 403):
            raise MapGatewayException(LocationErrorKind.ACCESS_DENIED)
        if resp.status_code != 200:
            raise MapGatewayException(
                LocationErrorKind.OPERATION_FAILED,
                f"Map search failed with HTTP {resp.status_code}",
            )
        try:
            items = resp.json()
        except ValueError as e:
            raise MapGatewayException(
                LocationErrorKind.OPERATION_FAILED, "Map search returned invalid JSON"
            ) from e
        if not isinstance(items, list):
            return []
        places = [p for p in (_to_place(i) for i in items if isinstance(i, dict)) if p]
        logger.debug("Map search %r returned %d place(s)", query, len(places))
        return places
