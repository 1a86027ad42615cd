"""
AI insight generation: prompt rendering, provider call and reply parsing
"""

import json
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import ValidationError

from agrosat.api.core.llm import LLMClient
from .models import AIInsight, WeatherSnapshot
from ..utils.logger import get_logger

logger = get_logger(__name__)

CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

INSIGHT_PROMPT_TEMPLATE = """
Ты - AgroSat AI, элитный агроном. Твоя главная задача - анализ СОСТОЯНИЯ ПОЛЯ (NDVI).
ДАННЫЕ ПОЛЯ:
- Культура: {crop_type}
- Текущая дата: {current_date}
- NDVI: {ndvi:.2f} (Ожидаемая норма: {norm:.2f})
- Отклонение от нормы: {deviation_percent:.1f}%

ПОГОДА:
- Температура: {temp}°C
- Состояние: {condition}
- Влажность: {humidity}%
- Осадки (14 дней): {rain_14d} мм

ЗАДАЧА:
Верни ТОЛЬКО валидный JSON:
{{
  "status_title": "Статус поля (3-4 слова)",
  "summary": "Краткий вывод.",
  "weather_impact": "Влияние погоды.",
  "recommendations": [
    {{ "title": "Совет", "desc": "Описание", "type": "general" | "water" | "fertilizer", "priority": "low" | "medium" | "high" }}
  ]
}}
"""


@dataclass
class InsightContext:
    """Numbers the insight prompt is rendered from"""
    crop_type: str
    current_date: date
    ndvi: float
    seasonal_norm: float
    deviation: float
    weather: WeatherSnapshot


def _format_number(value: float):
    return int(value) if float(value).is_integer() else value


def build_insight_prompt(context: InsightContext) -> str:
    weather = context.weather
    return INSIGHT_PROMPT_TEMPLATE.format(
        crop_type=context.crop_type,
        current_date=context.current_date.strftime("%d.%m.%Y"),
        ndvi=context.ndvi,
        norm=context.seasonal_norm,
        deviation_percent=context.deviation * 100,
        temp=_format_number(weather.temp),
        condition=weather.condition,
        humidity=_format_number(weather.humidity),
        rain_14d=_format_number(weather.rain_14d)
    )


def parse_insight(raw: Optional[str]) -> Optional[AIInsight]:
    """
    Best-effort parse of a model reply

    Code fences are stripped before parsing. Returns None when the reply
    is empty, not JSON, or lacks the expected fields.
    """
    text = CODE_FENCE_RE.sub("", raw or "").strip()
    if not text:
        return None

    try:
        return AIInsight.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning(f"Could not parse AI insight: {e}")
        return None


class InsightGenerator:
    """
    Turns analysis numbers into an AIInsight; falls back to the placeholder
    """

    def __init__(self, llm: LLMClient, temperature: float = 0.4, max_tokens: int = 500):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, context: InsightContext) -> AIInsight:
        if not self.llm.configured:
            logger.info("No LLM provider configured, using placeholder insight")
            return AIInsight.placeholder()

        prompt = build_insight_prompt(context)
        messages = [{"role": "user", "content": prompt + " Return JSON only."}]

        try:
            raw = await self.llm.chat_completion(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True
            )
        except Exception as e:
            logger.error(f"AI generation error ({self.llm.provider}): {e}")
            return AIInsight.placeholder()

        try:
            insight = parse_insight(raw)
        except Exception as e:
            logger.error(f"AI insight parse error ({self.llm.provider}): {e}")
            return AIInsight.placeholder()
        return insight or AIInsight.placeholder()
