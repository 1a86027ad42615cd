"""
Seasonal NDVI norm and stress-cause rules
"""

from datetime import date
from typing import Optional

from .models import WeatherSnapshot

# Deviation below which a stress cause is looked for
STRESS_DEVIATION_THRESHOLD = -0.15

NO_STRESS = "Нет явного стресса"
DROUGHT = "Дефицит влаги"
HEAT_STRESS = "Тепловой стресс"
DISEASE_RISK = "Риск заболеваний (Влажность)"
FREEZE_RISK = "Риск вымерзания"
GROWTH_DELAY = "Задержка вегетации / Питание"


def seasonal_norm(crop_type: Optional[str], when: date) -> float:
    """
    Expected NDVI for the calendar month of `when`

    The crop type is accepted for future per-crop tables but does not
    change the result.
    """
    month = when.month - 1  # 0 = January

    if month >= 10 or month <= 2:
        return 0.2
    if 3 <= month <= 4:
        return 0.45
    if 5 <= month <= 7:
        return 0.8
    return 0.5


def ndvi_deviation(ndvi_average: float, norm: float) -> float:
    return ndvi_average - norm


def classify_stress(deviation: float, weather: WeatherSnapshot, ndvi_average: float) -> str:
    """
    Pick the stress cause for a negative NDVI deviation

    Rules are checked in priority order and the first match wins.
    """
    if deviation >= STRESS_DEVIATION_THRESHOLD:
        return NO_STRESS

    if weather.rain_14d < 5 and weather.temp > 25:
        return DROUGHT
    if weather.temp > 30:
        return HEAT_STRESS
    if weather.humidity > 85:
        return DISEASE_RISK
    if weather.temp < 0 and ndvi_average > 0.3:
        return FREEZE_RISK
    return GROWTH_DELAY
