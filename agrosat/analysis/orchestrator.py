"""
Field analysis orchestrator

One run: validate inputs, imagery (or synthetic base), weather, seasonal
norm and stress cause, AI insight, then three independent writes
(analysis row, field's last analysis, activity entry).
"""

import asyncio
import math
import random
from datetime import datetime, timezone, date
from typing import Callable, Optional, Tuple
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from redis.exceptions import RedisError

from agrosat.api.config import Settings
from agrosat.api.core.cache import CacheService, weather_cache_key
from agrosat.api.core.llm import LLMClient
from agrosat.api.models.activity import ACTIVITY_ANALYSIS
from .agronomy import seasonal_norm, ndvi_deviation, classify_stress
from .imagery import CopernicusClient, ImageryScene, scene_analysis_base
from .insight import InsightGenerator, InsightContext
from .models import AnalysisBase, AnalysisOutcome, AnalysisRequest, WeatherSnapshot
from .synthetic import synthetic_analysis_base
from .weather import OpenMeteoClient, WeatherService
from ..utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_CROP = "Неизвестная культура"


class AnalysisInputError(ValueError):
    """Request cannot be analysed (missing or invalid coordinates)"""


class FieldNotFoundError(LookupError):
    """Field does not exist or belongs to another user"""


def validate_coordinates(lat: Optional[float], lon: Optional[float]) -> Tuple[float, float]:
    """
    Raises:
        AnalysisInputError: If a coordinate is missing, not finite or out of range
    """
    if lat is None or lon is None:
        raise AnalysisInputError("Latitude and Longitude are required for analysis.")

    lat, lon = float(lat), float(lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise AnalysisInputError("Latitude and Longitude must be finite numbers.")
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise AnalysisInputError(f"Coordinates out of range: ({lat}, {lon})")

    return lat, lon


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisOrchestrator:
    """
    Runs the analysis pipeline for one request

    Collaborators are injected once at startup; the store is per request.
    """

    def __init__(
        self,
        imagery: CopernicusClient,
        weather: WeatherService,
        insight: InsightGenerator,
        cache: Optional[CacheService] = None,
        weather_ttl: int = 1800,
        synthetic_delay: float = 1.5,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.imagery = imagery
        self.weather = weather
        self.insight = insight
        self.cache = cache
        self.weather_ttl = weather_ttl
        self.synthetic_delay = synthetic_delay
        self.rng = rng or random.Random()
        self.clock = clock

    async def run(self, request: AnalysisRequest, user_id: UUID, store) -> AnalysisOutcome:
        """
        Analyse a field and persist the result

        Raises:
            AnalysisInputError: Invalid coordinates or missing field id
            FieldNotFoundError: Field is not one of the user's fields
            Exception: Persistence errors propagate unchanged
        """
        lat, lon = validate_coordinates(request.lat, request.lon)
        if request.field_id is None:
            raise AnalysisInputError("field_id is required for analysis.")

        field = await store.get_field(request.field_id, user_id)
        if field is None:
            raise FieldNotFoundError(f"Field {request.field_id} not found")

        now = self.clock()
        today = now.date()
        crop_type = field.crop_type or UNKNOWN_CROP

        base = await self._analysis_base(lat, lon, request.date_from, request.date_to)
        weather = await self._weather(lat, lon, today)

        norm = seasonal_norm(crop_type, today)
        deviation = ndvi_deviation(base.ndvi_average, norm)
        stress_cause = classify_stress(deviation, weather, base.ndvi_average)

        insight = await self.insight.generate(InsightContext(
            crop_type=crop_type,
            current_date=today,
            ndvi=base.ndvi_average,
            seasonal_norm=norm,
            deviation=deviation,
            weather=weather
        ))

        outcome = AnalysisOutcome(
            **base.model_dump(),
            weather=weather,
            ai_insight=insight,
            stress_cause=stress_cause,
            ndvi_deviation=deviation,
            seasonal_norm=norm
        )

        # The field only points at an analysis once that analysis is stored
        record = await store.add_analysis(
            field_id=field.id,
            ndvi_average=outcome.ndvi_average,
            healthy_percent=outcome.healthy_percent,
            moderate_percent=outcome.moderate_percent,
            stressed_percent=outcome.stressed_percent,
            weather_data=weather.model_dump(mode='json'),
            ai_insight=insight.model_dump(mode='json')
        )
        outcome.analysis_id = record.id

        await store.set_last_analysis(field.id, user_id, outcome.snapshot(now))
        await store.log_activity(
            user_id,
            ACTIVITY_ANALYSIS,
            f'Выполнен анализ поля "{field.name}" (NDVI: {outcome.ndvi_average:.2f})'
        )

        logger.info(
            f"Analysis {record.id} for field {field.id}: NDVI {outcome.ndvi_average:.2f}, "
            f"norm {norm:.2f}, cause '{stress_cause}'"
        )
        return outcome

    async def _analysis_base(
        self,
        lat: float,
        lon: float,
        date_from: Optional[str],
        date_to: Optional[str]
    ) -> AnalysisBase:
        if self.imagery.configured:
            result = await run_in_threadpool(self.imagery.search_latest, lat, lon, date_from, date_to)
            if isinstance(result, ImageryScene):
                return scene_analysis_base(result)
            logger.warning(f"Imagery unavailable ({result.reason.value}): {result.message}")

        if self.synthetic_delay > 0:
            await asyncio.sleep(self.synthetic_delay)
        return synthetic_analysis_base(self.rng)

    async def _weather(self, lat: float, lon: float, today: date) -> WeatherSnapshot:
        key = weather_cache_key(lat, lon)

        cached = await self._cache_get(key)
        if cached:
            try:
                return WeatherSnapshot.model_validate(cached)
            except ValidationError:
                logger.warning(f"Discarding malformed cached weather for {key}")

        snapshot, is_live = await run_in_threadpool(self.weather.lookup, lat, lon, today)
        if is_live:
            await self._cache_set(key, snapshot.model_dump(mode='json'))
        return snapshot

    async def _cache_get(self, key: str):
        if self.cache is None:
            return None
        try:
            return await self.cache.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def _cache_set(self, key: str, value) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set(key, value, ttl=self.weather_ttl)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache write failed for {key}: {e}")


def build_orchestrator(
    settings: Settings,
    llm: LLMClient,
    cache: Optional[CacheService] = None
) -> AnalysisOrchestrator:
    """Wire the orchestrator from settings; called by the application lifespan"""
    imagery = CopernicusClient(
        username=settings.COPERNICUS_USER,
        password=settings.COPERNICUS_PASS,
        client_id=settings.COPERNICUS_CLIENT_ID,
        token_url=settings.COPERNICUS_TOKEN_URL,
        catalog_url=settings.COPERNICUS_CATALOG_URL,
        collection=settings.COPERNICUS_COLLECTION,
        default_start=settings.IMAGERY_DEFAULT_START,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        max_retries=settings.HTTP_MAX_RETRIES
    )
    weather = WeatherService(OpenMeteoClient(
        base_url=settings.OPEN_METEO_URL,
        past_days=settings.WEATHER_PAST_DAYS,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        max_retries=settings.HTTP_MAX_RETRIES
    ))
    insight = InsightGenerator(
        llm,
        temperature=settings.INSIGHT_TEMPERATURE,
        max_tokens=settings.INSIGHT_MAX_TOKENS
    )

    return AnalysisOrchestrator(
        imagery=imagery,
        weather=weather,
        insight=insight,
        cache=cache if settings.CACHE_ENABLED else None,
        weather_ttl=settings.CACHE_TTL_WEATHER,
        synthetic_delay=settings.SYNTHETIC_DELAY_SECONDS
    )
