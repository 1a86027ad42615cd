from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID


class Coordinates(BaseModel):
    """Dashboard point representation"""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class FieldCreate(BaseModel):
    """Schema for creating a field; the center comes from `coordinates` or `lat`/`lon`"""
    name: str = Field(..., min_length=1, max_length=255)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lon: Optional[float] = Field(None, ge=-180, le=180)
    coordinates: Optional[Coordinates] = None
    area_hectares: Optional[float] = Field(None, ge=0)
    crop_type: Optional[str] = Field(None, max_length=100)
    polygon: Optional[List[List[float]]] = Field(None, description="Boundary as [[lat, lon], ...]")

    @model_validator(mode='after')
    def require_center(self):
        if self.coordinates is None and (self.lat is None or self.lon is None):
            raise ValueError("Field center is required (coordinates or lat/lon)")
        return self

    @property
    def center(self) -> Coordinates:
        if self.coordinates is not None:
            return self.coordinates
        return Coordinates(lat=self.lat, lon=self.lon)


class FieldResponse(BaseModel):
    """Schema for field response"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    coordinates: Coordinates
    polygon: List[List[float]] = Field(default_factory=list)
    location: Optional[Dict[str, Any]] = None
    area_hectares: Optional[float] = None
    crop_type: Optional[str] = None
    last_analysis: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
