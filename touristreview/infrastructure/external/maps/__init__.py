"""Map search gateway implementations."""

from touristreview.infrastructure.external.maps.nominatim import NominatimSearchGateway

__all__ = ["NominatimSearchGateway"]
