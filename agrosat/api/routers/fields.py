from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Dict, Any
from uuid import UUID
from datetime import datetime, timezone
import logging

from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.models.activity import ACTIVITY_CREATE_FIELD, ACTIVITY_DELETE_FIELD
from agrosat.api.models.field import Field
from agrosat.api.schemas.analysis import HistoryPoint
from agrosat.api.schemas.field import FieldCreate, FieldResponse, Coordinates
from agrosat.api.store import FieldStore, get_store
from agrosat.analysis.synthetic import background_history
from agrosat.geo import (
    to_geojson_point,
    from_geojson_point,
    to_geojson_polygon,
    from_geojson_polygon
)

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_CROP = "Пшеница"


def field_response(field: Field) -> FieldResponse:
    """Translate stored GeoJSON into the dashboard representation"""
    return FieldResponse(
        id=field.id,
        user_id=field.user_id,
        name=field.name,
        coordinates=Coordinates(**from_geojson_point(field.location)),
        polygon=from_geojson_polygon(field.polygon),
        location=field.location,
        area_hectares=field.area_hectares,
        crop_type=field.crop_type,
        last_analysis=field.last_analysis,
        created_at=field.created_at
    )


def _empty_analysis(now: datetime) -> Dict[str, Any]:
    return {
        "ndvi_average": 0,
        "healthy_percent": 0,
        "moderate_percent": 0,
        "stressed_percent": 0,
        "alert": False,
        "date": now.isoformat()
    }


def _as_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@router.get("", response_model=List[FieldResponse])
async def list_fields(
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """List the caller's fields"""
    fields = await store.list_fields(user.id)
    return [field_response(f) for f in fields]


@router.post("", response_model=FieldResponse, status_code=status.HTTP_200_OK)
async def create_field(
    field_data: FieldCreate,
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """
    Create a field

    The center is stored as a GeoJSON point and the optional boundary as a
    closed GeoJSON polygon. New fields start with a zeroed last analysis.
    """
    center = field_data.center
    area = field_data.area_hectares or 0

    logger.info(f"Creating field '{field_data.name}' for user {user.id}")

    field = await store.create_field(
        user.id,
        name=field_data.name,
        location=to_geojson_point(center.lat, center.lon),
        polygon=to_geojson_polygon(field_data.polygon),
        area_hectares=area,
        crop_type=field_data.crop_type or DEFAULT_CROP,
        last_analysis=_empty_analysis(datetime.now(timezone.utc))
    )

    await store.log_activity(
        user.id,
        ACTIVITY_CREATE_FIELD,
        f'Добавлено новое поле "{field_data.name}" ({area:g} га)'
    )

    return field_response(field)


@router.delete("/{field_id}")
async def delete_field(
    field_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """Delete one of the caller's fields; its analyses cascade"""
    deleted = await store.delete_field(field_id, user.id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Field not found"
        )

    await store.log_activity(user.id, ACTIVITY_DELETE_FIELD, f"Удалено поле (ID: {field_id})")

    return {"success": True}


@router.get("/{field_id}/history", response_model=List[HistoryPoint])
async def field_history(
    field_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """
    NDVI history of a field

    Two years of weekly synthetic background points are merged with the
    field's real analyses so the chart is never empty. Sorted by date.
    """
    field = await store.get_field(field_id, user.id)
    if field is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Field not found"
        )

    analyses = await store.list_analyses(field_id, user.id)

    points = background_history(datetime.now(timezone.utc))
    for analysis in analyses:
        weather = analysis.weather_data or {}
        points.append({
            "id": str(analysis.id),
            "date": analysis.created_at.isoformat(),
            "ndvi_average": analysis.ndvi_average,
            "moisture": weather.get("humidity") or 50,
            "temp": weather.get("temp") or 20,
            "weather_condition": weather.get("condition") or "Unknown",
            "alert": (analysis.stressed_percent or 0) > 15,
            "is_mock": False
        })

    points.sort(key=lambda p: _as_datetime(p["date"]))
    return points
