import logging

import httpx
import pytest
import uvicorn
from fastapi.testclient import TestClient

import weather_proxy.app as app_module
from weather_proxy.app import create_app, parse_location
from weather_proxy.config import Settings
from weather_proxy.errors import UpstreamError, ValidationError
from weather_proxy.services import WeatherClient


class FakeWeatherClient:
    """Stands in for WeatherClient and records every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def _answer(self, name, arg, value):
        self.calls.append((name, arg))
        if self.fail:
            raise UpstreamError("provider exploded: secret detail")
        return value

    async def fetch_current_weather(self, query):
        return await self._answer("current", query, {"name": "London", "main": {"temp": 12.5}})

    async def fetch_forecast(self, query):
        return await self._answer("forecast", query, {"list": [], "dailyForecasts": []})

    async def search_locations(self, query):
        return await self._answer("locations", query, [{"name": "London", "lat": 51.5, "lon": -0.12, "country": "GB"}])


@pytest.fixture
def fake():
    return FakeWeatherClient()


@pytest.fixture
def client(fake):
    settings = Settings(api_key="test-key")
    return TestClient(create_app(settings, client=fake))


def test_root_is_plain_text(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "Weather API is running!"


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_weather_without_location_is_400_and_no_upstream_call(client, fake):
    r = client.get("/api/weather")
    assert r.status_code == 400
    assert r.json() == {"error": "Either coordinates or city name is required"}
    assert fake.calls == []


def test_weather_with_only_lat_is_400(client, fake):
    r = client.get("/api/weather", params={"lat": "51.5"})
    assert r.status_code == 400
    assert fake.calls == []


def test_weather_by_coordinates(client, fake):
    r = client.get("/api/weather", params={"lat": "51.5", "lon": "-0.12"})
    assert r.status_code == 200
    assert r.json() == {"name": "London", "main": {"temp": 12.5}}
    (name, query), = fake.calls
    assert name == "current"
    assert (query.lat, query.lon) == (51.5, -0.12)


def test_forecast_by_city(client, fake):
    r = client.get("/api/forecast", params={"city": "London"})
    assert r.status_code == 200
    assert r.json()["dailyForecasts"] == []
    (name, query), = fake.calls
    assert name == "forecast"
    assert query.city == "London"


def test_forecast_without_location_is_400(client, fake):
    r = client.get("/api/forecast", params={"city": "  "})
    assert r.status_code == 400
    assert r.json() == {"error": "Either coordinates or city name is required"}
    assert fake.calls == []


def test_empty_search_is_400_and_no_upstream_call(client, fake):
    r = client.get("/api/locations", params={"query": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "Search query is required"}
    assert client.get("/api/locations").status_code == 400
    assert fake.calls == []


def test_search_returns_matches(client, fake):
    r = client.get("/api/locations", params={"query": "London"})
    assert r.status_code == 200
    assert r.json()[0]["country"] == "GB"
    assert fake.calls == [("locations", "London")]


@pytest.mark.parametrize("path, params, message", [
    ("/api/weather", {"city": "London"}, "Failed to fetch weather data"),
    ("/api/forecast", {"lat": "1", "lon": "2"}, "Failed to fetch forecast data"),
    ("/api/locations", {"query": "London"}, "Failed to search locations"),
])
def test_upstream_failure_is_generic_500(path, params, message):
    fake = FakeWeatherClient(fail=True)
    client = TestClient(create_app(Settings(), client=fake))

    r = client.get(path, params=params)

    assert r.status_code == 500
    assert r.json() == {"error": message}
    assert "secret" not in r.text
    assert len(fake.calls) == 1


def test_unknown_origin_is_rejected_before_routing(client, fake):
    r = client.get("/api/weather", params={"city": "London"}, headers={"Origin": "https://evil.example"})
    assert r.status_code == 403
    assert r.json() == {"error": "Not allowed by CORS"}
    assert fake.calls == []


def test_known_origin_gets_cors_headers(client, fake):
    origin = "http://localhost:5173"
    r = client.get("/api/weather", params={"city": "London"}, headers={"Origin": origin})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == origin
    assert r.headers["access-control-allow-credentials"] == "true"


def test_request_without_origin_is_allowed(client):
    assert client.get("/api/locations", params={"query": "Paris"}).status_code == 200


def test_parse_location_prefers_complete_coordinates():
    q = parse_location("51.5", "-0.12", "London")
    assert (q.lat, q.lon, q.city) == (51.5, -0.12, "London")

    q = parse_location("51.5", "", "London")
    assert q.has_coordinates is False
    assert q.city == "London"

    with pytest.raises(ValidationError):
        parse_location(None, None, None)
    with pytest.raises(ValidationError):
        parse_location("north", "west", "")


def test_forecast_with_unusable_timestamp_is_json_500():
    body = {"list": [{"dt": 10**15, "main": {"temp": 1, "temp_min": 1, "temp_max": 1}}]}
    settings = Settings(api_key="test-key")
    weather = WeatherClient(settings, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body)))
    client = TestClient(create_app(settings, client=weather))

    r = client.get("/api/forecast", params={"city": "x"})

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch forecast data"}


def test_unparseable_coordinates_fall_back_to_city_with_warning(client, fake, caplog):
    r = client.get("/api/weather", params={"lat": "abc", "lon": "1", "city": "London"})

    assert r.status_code == 200
    (name, query), = fake.calls
    assert query.city == "London"
    assert not query.has_coordinates
    assert "Ignoring unparseable coordinate" in caplog.text


def test_main_passes_configured_log_level_to_uvicorn(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)
    seen = {}
    monkeypatch.setattr(app_module, "load_settings", lambda: Settings(port=8123, log_level="WARNING"))
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: seen.update(kwargs))

    app_module.main()

    assert seen["port"] == 8123
    assert seen["log_level"] == "warning"


def test_default_amplify_entry_only_matches_with_trailing_slash(client, fake):
    r = client.get("/", headers={"Origin": "https://main.d3erp14kpzu5wp.amplifyapp.com"})
    assert r.status_code == 403

    r = client.get("/", headers={"Origin": "https://main.d3erp14kpzu5wp.amplifyapp.com/"})
    assert r.status_code == 200
