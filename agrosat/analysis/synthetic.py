"""
Synthetic vegetation data used when no satellite scene is available
"""

import math
import random
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional

from .models import AnalysisBase

# Sampling bands for the synthetic analysis base
NDVI_BAND = (0.58, 0.78)
HEALTHY_BAND = (65.0, 85.0)
MODERATE_BAND = (20.0, 30.0)
STRESSED_BAND = (5.0, 10.0)
ALERT_PROBABILITY = 0.2


def synthetic_analysis_base(rng: Optional[random.Random] = None) -> AnalysisBase:
    """
    Pseudo-random analysis base; never carries a map reference
    """
    rng = rng or random.Random()
    return AnalysisBase(
        ndvi_average=rng.uniform(*NDVI_BAND),
        healthy_percent=rng.uniform(*HEALTHY_BAND),
        moderate_percent=rng.uniform(*MODERATE_BAND),
        stressed_percent=rng.uniform(*STRESSED_BAND),
        alert=rng.random() < ALERT_PROBABILITY,
        map_url=None
    )


def background_history(
    now: datetime,
    rng: Optional[random.Random] = None,
    weeks: int = 104
) -> List[Dict[str, Any]]:
    """
    Weekly synthetic NDVI history so charts are never empty

    Points start one week before `now` and go back `weeks` weeks; the
    result is ordered oldest first. NDVI follows a seasonal cosine around
    0.5 with noise and occasional dips.
    """
    rng = rng or random.Random()
    points = []

    for i in range(weeks):
        point_date = now - timedelta(days=(i + 1) * 7)
        day_of_year = point_date.timetuple().tm_yday

        seasonal_factor = -math.cos((day_of_year / 365) * 2 * math.pi)
        base_ndvi = 0.5 + seasonal_factor * 0.35
        noise = rng.random() * 0.1 - 0.05
        if rng.random() > 0.85:
            noise -= 0.15

        ndvi = max(0.1, min(0.95, base_ndvi + noise))
        moisture = max(10.0, min(90.0, 50 + seasonal_factor * -10 + (rng.random() * 40 - 20)))
        temp = 10 + seasonal_factor * 20 + (rng.random() * 10 - 5)

        if temp < 0:
            condition = "Snow"
        elif moisture > 80:
            condition = "Rain"
        elif moisture > 60:
            condition = "Clouds"
        elif moisture > 40:
            condition = "Partly Cloudy"
        else:
            condition = "Clear"

        points.append({
            "id": f"mock_{i}",
            "date": point_date.isoformat(),
            "ndvi_average": round(ndvi, 2),
            "moisture": round(moisture),
            "temp": round(temp),
            "weather_condition": condition,
            "alert": ndvi < base_ndvi - 0.2,
            "is_mock": True
        })

    points.reverse()
    return points
