import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Optional
from .config import Settings, load_settings
from .errors import ValidationError, UpstreamError
from .models import LocationQuery
from .services import WeatherClient


logger = logging.getLogger(__name__)

LOCATION_REQUIRED = "Either coordinates or city name is required"
QUERY_REQUIRED = "Search query is required"


def _coordinate(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable coordinate {value!r}")
        return None


def parse_location(lat: Optional[str], lon: Optional[str], city: Optional[str]) -> LocationQuery:
    """Raise ValidationError unless a full coordinate pair or a city is given."""
    query = LocationQuery(
        lat=_coordinate(lat),
        lon=_coordinate(lon),
        city=(city or "").strip() or None,
    )
    if query.is_empty:
        raise ValidationError(LOCATION_REQUIRED)
    return query


def create_app(settings: Settings, client: Optional[WeatherClient] = None) -> FastAPI:
    client = client or WeatherClient(settings)
    allowed_origins = list(settings.allowed_origins)

    app = FastAPI(title="Weather API Proxy")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Registered after CORSMiddleware so it wraps it and runs first
    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in allowed_origins:
            logger.warning(f"Rejected request from origin {origin}")
            return JSONResponse({"error": "Not allowed by CORS"}, status_code=403)
        return await call_next(request)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Weather API is running!"

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    @app.get("/api/weather")
    async def api_weather(lat: str | None = None, lon: str | None = None, city: str | None = None):
        try:
            query = parse_location(lat, lon, city)
            logger.info(f"Current weather request lat={lat} lon={lon} city={city}")
            return await client.fetch_current_weather(query)
        except ValidationError as ve:
            return JSONResponse({"error": str(ve)}, status_code=400)
        except UpstreamError:
            logger.exception("Error fetching weather data")
            return JSONResponse({"error": "Failed to fetch weather data"}, status_code=500)

    @app.get("/api/forecast")
    async def api_forecast(lat: str | None = None, lon: str | None = None, city: str | None = None):
        try:
            query = parse_location(lat, lon, city)
            return await client.fetch_forecast(query)
        except ValidationError as ve:
            return JSONResponse({"error": str(ve)}, status_code=400)
        except UpstreamError:
            logger.exception("Error fetching forecast data")
            return JSONResponse({"error": "Failed to fetch forecast data"}, status_code=500)

    @app.get("/api/locations")
    async def api_locations(query: str | None = None):
        try:
            text = (query or "").strip()
            if not text:
                raise ValidationError(QUERY_REQUIRED)
            return await client.search_locations(text)
        except ValidationError as ve:
            return JSONResponse({"error": str(ve)}, status_code=400)
        except UpstreamError:
            logger.exception("Error searching locations")
            return JSONResponse({"error": "Failed to search locations"}, status_code=500)

    return app


def main():
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info(f"Starting weather proxy on port {settings.port}")
    logger.info(f"Allowed origins: {', '.join(settings.allowed_origins)}")
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
