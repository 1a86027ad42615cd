"""
Weather lookup backed by the Open-Meteo forecast API
"""

from datetime import date
from typing import Optional, Dict, Any, Tuple
import requests

from .http import create_session
from .models import WeatherSnapshot, WeatherCondition
from ..utils.logger import get_logger

logger = get_logger(__name__)

# (first code, last code, condition), checked in order
WMO_CONDITION_RANGES = [
    (0, 0, WeatherCondition.CLEAR),
    (1, 3, WeatherCondition.CLOUDS),
    (45, 48, WeatherCondition.CLOUDS),
    (51, 67, WeatherCondition.RAIN),
    (71, 77, WeatherCondition.SNOW),
    (80, 82, WeatherCondition.RAIN),
    (85, 86, WeatherCondition.SNOW),
]


def weather_code_to_condition(code: Optional[int]) -> WeatherCondition:
    """Map a WMO weather code to a coarse condition label"""
    if code is None:
        return WeatherCondition.UNKNOWN

    for first, last, condition in WMO_CONDITION_RANGES:
        if first <= code <= last:
            return condition

    if 95 <= code <= 99:
        return WeatherCondition.THUNDERSTORM

    return WeatherCondition.UNKNOWN


def fallback_weather(when: date) -> WeatherSnapshot:
    """
    Synthetic reading used when the forecast provider is unavailable

    Winter is November through March, summer June through August.
    """
    month = when.month
    is_winter = month >= 11 or month <= 3
    is_summer = 6 <= month <= 8

    if is_winter:
        temp, condition = -5, WeatherCondition.SNOW
    elif is_summer:
        temp, condition = 25, WeatherCondition.CLEAR
    else:
        temp, condition = 10, WeatherCondition.CLOUDS

    return WeatherSnapshot(temp=temp, condition=condition, humidity=60, wind=5, rain_14d=0)


def parse_forecast(data: Dict[str, Any]) -> WeatherSnapshot:
    """
    Parse an Open-Meteo response into a weather snapshot

    Raises:
        KeyError, TypeError, ValueError: If the payload is incomplete
    """
    current = data["current"]
    daily = data["daily"]

    # Missing days count as no rain
    rain_sum = sum((value or 0) for value in daily["precipitation_sum"])

    return WeatherSnapshot(
        temp=round(current["temperature_2m"]),
        condition=weather_code_to_condition(current.get("weather_code")),
        humidity=round(current["relative_humidity_2m"]),
        # km/h -> m/s
        wind=round(current["wind_speed_10m"] / 3.6, 1),
        rain_14d=round(rain_sum)
    )


class OpenMeteoClient:
    """
    Connector for the Open-Meteo forecast API
    """

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(
        self,
        base_url: Optional[str] = None,
        past_days: int = 14,
        timeout: float = 10.0,
        max_retries: int = 2,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Open-Meteo connector

        Args:
            base_url: Forecast endpoint (defaults to the public API)
            past_days: Length of the trailing precipitation window
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            session: Pre-built session (tests)
        """
        self.base_url = base_url or self.BASE_URL
        self.past_days = past_days
        self.timeout = timeout
        self.session = session or create_session(max_retries=max_retries)

    def fetch_current(self, lat: float, lon: float) -> WeatherSnapshot:
        """
        Fetch current conditions and trailing precipitation

        Raises:
            requests.RequestException: On transport or HTTP errors
            KeyError, TypeError, ValueError: On malformed payloads
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": "temperature_2m,relative_humidity_2m,wind_speed_10m,weather_code",
            "daily": "precipitation_sum",
            "past_days": self.past_days,
            "forecast_days": 1,
            "timezone": "auto"
        }

        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()

        return parse_forecast(response.json())


class WeatherService:
    """
    Weather lookup that never fails: provider errors yield the seasonal fallback
    """

    def __init__(self, client: OpenMeteoClient):
        self.client = client

    def lookup(self, lat: float, lon: float, when: date) -> Tuple[WeatherSnapshot, bool]:
        """
        Get the weather snapshot for a location

        Returns:
            (snapshot, is_live) where is_live is False for the fallback reading
        """
        try:
            snapshot = self.client.fetch_current(lat, lon)
            logger.info(f"Fetched weather for ({lat:.4f}, {lon:.4f}): {snapshot.condition}, {snapshot.temp}°C")
            return snapshot, True
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Weather lookup failed, using seasonal fallback: {e}")
            return fallback_weather(when), False
