
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class LocationQuery(BaseModel):
    city: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def is_empty(self) -> bool:
        return not self.has_coordinates and not self.city


class WeatherCondition(BaseModel):
    # Upstream fields we don't name are kept as-is
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    main: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class SampleMain(BaseModel):
    model_config = ConfigDict(extra="allow")

    temp: float
    temp_min: float
    temp_max: float
    humidity: Optional[int] = None


class SampleWind(BaseModel):
    model_config = ConfigDict(extra="allow")

    speed: Optional[float] = None


class ForecastSample(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    dt: int
    main: SampleMain
    wind: SampleWind = Field(default_factory=SampleWind)
    weather: List[WeatherCondition] = Field(default_factory=list)

    @property
    def condition(self) -> Optional[WeatherCondition]:
        return self.weather[0] if self.weather else None


class TempRange(BaseModel):
    min: float
    max: float


class TimePoint(BaseModel):
    time: str
    temp: float
    weather: Optional[WeatherCondition] = None


class DailySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    day: str
    temps: TempRange
    weather: Optional[WeatherCondition] = None
    humidity: Optional[int] = None
    wind: Optional[float] = None
    time_points: List[TimePoint] = Field(default_factory=list, alias="timePoints")


class LocationMatch(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    lat: float
    lon: float
    country: Optional[str] = None
    state: Optional[str] = None
