from datetime import datetime, timezone
from typing import Dict, Iterable, List

from .models import DailySummary, ForecastSample, TempRange, TimePoint


def _sample_datetime(sample: ForecastSample) -> datetime:
    # Provider timestamps are bucketed as UTC, no local conversion
    return datetime.fromtimestamp(sample.dt, tz=timezone.utc)


def format_time_label(moment: datetime) -> str:
    """12-hour clock label, e.g. '03:00 PM'."""
    return moment.strftime("%I:%M %p")


def day_name(moment: datetime) -> str:
    """Short English weekday, e.g. 'Mon'."""
    return moment.strftime("%a")


def group_daily_forecasts(samples: Iterable[ForecastSample]) -> List[DailySummary]:
    """
    Regroup 3-hour forecast samples into one summary per calendar day.

    Days come out in the order they are first seen. Temperature bounds widen
    with every sample of the day; weather, humidity and wind stay at the
    values of the first sample of that day.
    """
    daily: Dict[str, DailySummary] = {}

    for sample in samples:
        moment = _sample_datetime(sample)
        day = moment.date().isoformat()

        summary = daily.get(day)
        if summary is None:
            summary = DailySummary(
                date=day,
                day=day_name(moment),
                temps=TempRange(min=sample.main.temp_min, max=sample.main.temp_max),
                weather=sample.condition,
                humidity=sample.main.humidity,
                wind=sample.wind.speed,
            )
            daily[day] = summary
        else:
            summary.temps.min = min(summary.temps.min, sample.main.temp_min)
            summary.temps.max = max(summary.temps.max, sample.main.temp_max)

        summary.time_points.append(TimePoint(
            time=format_time_label(moment),
            temp=sample.main.temp,
            weather=sample.condition,
        ))

    return list(daily.values())
