"""
Persistence for fields, analyses, activity and profiles

Every query is scoped to the calling user. Each write commits on its own;
no transaction spans several writes.
"""

from typing import Optional, List, Dict, Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession

from agrosat.api.core.database import get_db
from agrosat.api.models import Profile, Field, Analysis, ActivityLog


class FieldStore:
    """Repository over one request-scoped database session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    # Fields

    async def list_fields(self, user_id: UUID) -> List[Field]:
        result = await self.db.execute(
            select(Field).where(Field.user_id == user_id).order_by(Field.created_at)
        )
        return list(result.scalars().all())

    async def get_field(self, field_id: UUID, user_id: UUID) -> Optional[Field]:
        result = await self.db.execute(
            select(Field).where(and_(Field.id == field_id, Field.user_id == user_id))
        )
        return result.scalar_one_or_none()

    async def create_field(self, user_id: UUID, **values: Any) -> Field:
        return await self._save(Field(user_id=user_id, **values))

    async def delete_field(self, field_id: UUID, user_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Field).where(and_(Field.id == field_id, Field.user_id == user_id))
        )
        await self.db.commit()
        return result.rowcount > 0

    async def set_last_analysis(self, field_id: UUID, user_id: UUID, snapshot: Dict[str, Any]) -> None:
        field = await self.get_field(field_id, user_id)
        if field is None:
            return
        field.last_analysis = snapshot
        await self.db.commit()

    # Analyses

    async def add_analysis(
        self,
        field_id: UUID,
        ndvi_average: float,
        healthy_percent: float,
        moderate_percent: float,
        stressed_percent: float,
        weather_data: Dict[str, Any],
        ai_insight: Dict[str, Any]
    ) -> Analysis:
        return await self._save(Analysis(
            field_id=field_id,
            ndvi_average=ndvi_average,
            healthy_percent=healthy_percent,
            moderate_percent=moderate_percent,
            stressed_percent=stressed_percent,
            weather_data=weather_data,
            ai_insight=ai_insight
        ))

    async def list_analyses(self, field_id: UUID, user_id: UUID) -> List[Analysis]:
        """Analyses of one of the user's fields, oldest first"""
        result = await self.db.execute(
            select(Analysis)
            .join(Field, Analysis.field_id == Field.id)
            .where(and_(Analysis.field_id == field_id, Field.user_id == user_id))
            .order_by(Analysis.created_at.asc())
        )
        return list(result.scalars().all())

    # Activity log

    async def log_activity(self, user_id: UUID, activity_type: str, details: str) -> ActivityLog:
        return await self._save(ActivityLog(user_id=user_id, type=activity_type, details=details))

    async def list_activity(self, user_id: UUID) -> List[ActivityLog]:
        """Newest first"""
        result = await self.db.execute(
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.created_at.desc())
        )
        return list(result.scalars().all())

    # Profiles

    async def get_profile(self, user_id: UUID) -> Optional[Profile]:
        return await self.db.get(Profile, user_id)

    async def create_profile(self, user_id: UUID, email: Optional[str], name: str) -> Profile:
        return await self._save(Profile(id=user_id, email=email, name=name))

    async def update_profile(
        self,
        user_id: UUID,
        name: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None
    ) -> Optional[Profile]:
        profile = await self.get_profile(user_id)
        if profile is None:
            return None
        if name:
            profile.name = name
        if settings is not None:
            profile.settings = settings
        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    async def ping(self) -> None:
        """Cheap query used by the health check"""
        await self.db.execute(select(Field.id).limit(1))


async def get_store(db: AsyncSession = Depends(get_db)) -> FieldStore:
    return FieldStore(db)
