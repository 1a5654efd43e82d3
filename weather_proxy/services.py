import httpx
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError as SchemaError
from .config import Settings
from .errors import UpstreamError
from .forecast import group_daily_forecasts
from .models import ForecastSample, LocationMatch, LocationQuery


logger = logging.getLogger(__name__)

SEARCH_LIMIT = 5


def build_location_params(query: LocationQuery) -> Dict[str, Any]:
    """Coordinates win over a place name when both are given."""
    if query.has_coordinates:
        return {"lat": query.lat, "lon": query.lon}
    if query.city:
        return {"q": query.city}
    return {}


class WeatherClient:
    """Thin async client for the OpenWeatherMap weather and geocoding APIs."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            settings: Startup configuration (credential and base URLs)
            transport: Optional httpx transport, used to stub the provider
        """
        self.settings = settings
        self._transport = transport

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        """One outbound GET. Any failure surfaces as UpstreamError."""
        params = {**params, "appid": self.settings.api_key}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                r = await client.get(url, params=params)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPError as e:
            logger.error(f"Upstream request to {url} failed: {e}")
            raise UpstreamError(f"Weather provider error: {e}") from e
        except ValueError as e:
            logger.error(f"Upstream response from {url} is not valid JSON: {e}")
            raise UpstreamError(f"Malformed provider response: {e}") from e

    async def fetch_current_weather(self, query: LocationQuery) -> Dict[str, Any]:
        """Current conditions, verbatim from the provider."""
        params = {**build_location_params(query), "units": "metric"}
        return await self._get_json(f"{self.settings.base_url}/weather", params)

    async def fetch_forecast(self, query: LocationQuery) -> Dict[str, Any]:
        """
        5-day / 3-hour forecast with a `dailyForecasts` list appended.
        """
        params = {**build_location_params(query), "units": "metric"}
        data = await self._get_json(f"{self.settings.base_url}/forecast", params)

        try:
            samples = [ForecastSample.model_validate(item) for item in data["list"]]
        except (KeyError, TypeError, SchemaError) as e:
            logger.error(f"Forecast response has no usable sample list: {e}")
            raise UpstreamError(f"Malformed forecast response: {e}") from e

        try:
            daily = group_daily_forecasts(samples)
        except (ValueError, OverflowError, OSError) as e:
            logger.error(f"Forecast samples could not be grouped by day: {e}")
            raise UpstreamError(f"Unusable forecast timestamps: {e}") from e
        return {
            **data,
            "dailyForecasts": [d.model_dump(by_alias=True, exclude_none=True) for d in daily],
        }

    async def search_locations(self, query: str) -> List[Dict[str, Any]]:
        """Up to five geocoding matches for a free-text place name."""
        params = {"q": query, "limit": SEARCH_LIMIT}
        data = await self._get_json(f"{self.settings.geo_url}/direct", params)

        try:
            matches = [LocationMatch.model_validate(item) for item in data[:SEARCH_LIMIT]]
        except (KeyError, TypeError, SchemaError) as e:
            logger.error(f"Geocoding response is not a list of places: {e}")
            raise UpstreamError(f"Malformed geocoding response: {e}") from e
        return [m.model_dump(exclude_none=True) for m in matches]
