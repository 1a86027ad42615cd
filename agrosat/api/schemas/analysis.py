from pydantic import BaseModel
from typing import Optional, Union


class HistoryPoint(BaseModel):
    """Single point of a field's NDVI history"""
    id: str
    date: str
    ndvi_average: Optional[float] = None
    moisture: Optional[Union[int, float]] = None
    temp: Optional[Union[int, float]] = None
    weather_condition: str = "Unknown"
    alert: bool = False
    is_mock: bool = False


class AnalysisErrorResponse(BaseModel):
    """Body of a failed analysis request"""
    error: str
    success: bool = False
