"""
Data models for the field analysis pipeline
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class WeatherCondition(str, Enum):
    """Coarse weather condition labels"""
    CLEAR = "Clear"
    CLOUDS = "Clouds"
    RAIN = "Rain"
    SNOW = "Snow"
    THUNDERSTORM = "Thunderstorm"
    UNKNOWN = "Unknown"


class RecommendationType(str, Enum):
    GENERAL = "general"
    WATER = "water"
    FERTILIZER = "fertilizer"


class RecommendationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WeatherSnapshot(BaseModel):
    """
    Weather reading attached to one analysis
    """
    temp: float = Field(..., description="Air temperature in Celsius")
    condition: WeatherCondition = Field(WeatherCondition.UNKNOWN, description="Coarse condition label")
    humidity: float = Field(..., description="Relative humidity percentage")
    wind: float = Field(..., description="Wind speed in m/s")
    rain_14d: float = Field(0, description="Precipitation over the trailing 14 days in mm")

    @field_validator('humidity')
    @classmethod
    def validate_humidity(cls, v: float) -> float:
        """Validate humidity is between 0 and 100"""
        if v < 0 or v > 100:
            raise ValueError(f"Humidity {v}% must be between 0 and 100")
        return v

    @field_validator('rain_14d', 'wind')
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Value {v} cannot be negative")
        return v

    class Config:
        use_enum_values = True


class Recommendation(BaseModel):
    """Single agronomic recommendation from the insight generator"""
    title: str
    desc: str = ""
    type: RecommendationType = RecommendationType.GENERAL
    priority: RecommendationPriority = RecommendationPriority.MEDIUM

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        values = {item.value for item in RecommendationType}
        return v if isinstance(v, str) and v in values else RecommendationType.GENERAL.value

    @field_validator('priority', mode='before')
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        values = {item.value for item in RecommendationPriority}
        return v if isinstance(v, str) and v in values else RecommendationPriority.MEDIUM.value

    class Config:
        use_enum_values = True


class AIInsight(BaseModel):
    """Natural-language assessment of a field"""
    status_title: str
    summary: str
    weather_impact: str
    recommendations: List[Recommendation] = Field(default_factory=list)

    @classmethod
    def placeholder(cls) -> "AIInsight":
        """Fixed insight used whenever the language model gives nothing usable"""
        return cls(
            status_title="Анализ завершен",
            summary="Данные обработаны.",
            weather_impact="Нет данных.",
            recommendations=[]
        )


class AnalysisBase(BaseModel):
    """
    Vegetation metrics before weather and insight enrichment
    """
    ndvi_average: float = Field(..., description="Average NDVI over the field")
    healthy_percent: float = Field(..., description="Share of healthy vegetation")
    moderate_percent: float = Field(..., description="Share of moderately stressed vegetation")
    stressed_percent: float = Field(..., description="Share of stressed vegetation")
    alert: bool = Field(False, description="Whether the field needs attention")
    map_url: Optional[str] = Field(None, description="Preview of the matched satellite scene")
    product_id: Optional[str] = Field(None, description="Satellite product identifier")
    acquisition_date: Optional[str] = Field(None, description="Scene acquisition timestamp")


class AnalysisRequest(BaseModel):
    """Inputs of one orchestrator run"""
    field_id: Optional[UUID] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None


class AnalysisOutcome(AnalysisBase):
    """
    Composite result of one analysis request
    """
    analysis_id: Optional[UUID] = None
    weather: WeatherSnapshot
    ai_insight: AIInsight
    stress_cause: str
    ndvi_deviation: float
    seasonal_norm: float
    success: bool = True

    def snapshot(self, completed_at: datetime) -> Dict[str, Any]:
        """Denormalized copy stored on the field as its last analysis"""
        data = self.model_dump(mode='json', exclude={'analysis_id', 'success'})
        data['date'] = completed_at.isoformat()
        return data
