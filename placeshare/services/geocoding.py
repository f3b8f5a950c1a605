"""
PlaceShare Backend: Geocoding Resolvers
=======================================

What:  Turns a free-form address into {latitude, longitude}.
How:   `GeocodingResolver` is the interface PlaceService depends on. The
       Google implementation calls the Maps Geocoding API with httpx and
       retries transport failures with tenacity; every other failure (no
       match, bad key, non-200) fails closed with GeocodingError.
When:  First step of place creation, before the image is stored and before
       any transaction, so a failure here has no side effect.

Selection (build_geocoder):
    GOOGLE_MAPS_API_KEY set    → GoogleGeocodingResolver
    GOOGLE_MAPS_API_KEY empty  → StaticGeocodingResolver (fixed coordinates)
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from placeshare.config import Settings
from placeshare.exceptions import GeocodingError
from placeshare.schemas.place import Coordinates

logger = logging.getLogger(__name__)


class GeocodingResolver(ABC):
    """
    Contract:
        - resolve() returns Coordinates for a resolvable address
        - anything else raises GeocodingError (422); no partial results
    """

    @abstractmethod
    async def resolve(self, address: str) -> Coordinates:
        ...


class StaticGeocodingResolver(GeocodingResolver):
    """Offline resolver; every address maps to the same point."""

    DEFAULT_LATITUDE = 40.7484474
    DEFAULT_LONGITUDE = -73.9871516

    def __init__(
        self,
        latitude: float = DEFAULT_LATITUDE,
        longitude: float = DEFAULT_LONGITUDE,
    ):
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)

    async def resolve(self, address: str) -> Coordinates:
        if not address or not address.strip():
            raise GeocodingError(context={"address": address})
        return self.coordinates


class GoogleGeocodingResolver(GeocodingResolver):
    """
    Google Maps Geocoding API client.

    Error Handling Chain:
        transport error → tenacity retries (RETRY_MAX_ATTEMPTS, backoff + jitter)
        → retries exhausted → GeocodingError
        non-200 / status != "OK" / empty results → GeocodingError, no retry
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.google_maps_api_key
        self.url = settings.geocoding_url
        self.timeout = settings.geocoding_timeout
        self.max_attempts = settings.retry_max_attempts
        self.min_wait = settings.retry_min_wait
        self.max_wait = settings.retry_max_wait
        self._transport = transport

    async def resolve(self, address: str) -> Coordinates:
        try:
            payload = await self._fetch_with_retry(address)
        except RetryError as e:
            logger.error(
                "Geocoding retries exhausted for %r: %s",
                address,
                str(e.last_attempt.exception()) if e.last_attempt else "Unknown error",
            )
            raise GeocodingError(context={"address": address, "attempts": self.max_attempts})
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Geocoding request for %r failed: %s", address, str(e))
            raise GeocodingError(context={"address": address, "error_type": type(e).__name__})

        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            logger.info("Geocoding returned no match for %r (status=%s)", address, status)
            raise GeocodingError(context={"address": address, "status": status})

        try:
            location = results[0]["geometry"]["location"]
            return Coordinates(latitude=location["lat"], longitude=location["lng"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed geocoding payload for %r: %s", address, str(e))
            raise GeocodingError(context={"address": address})

    async def _fetch_with_retry(self, address: str) -> dict:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.min_wait,
                max=self.max_wait,
                jitter=min(1, self.max_wait),
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        async for attempt in retrying:
            with attempt:
                return await self._fetch(address)

    async def _fetch(self, address: str) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.url, params={"address": address, "key": self.api_key})
            response.raise_for_status()
            return response.json()


def build_geocoder(settings: Settings) -> GeocodingResolver:
    if settings.google_maps_api_key:
        return GoogleGeocodingResolver(settings)
    logger.warning("GOOGLE_MAPS_API_KEY not set; using static geocoder")
    return StaticGeocodingResolver()
