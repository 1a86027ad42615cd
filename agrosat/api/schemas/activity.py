from pydantic import BaseModel, ConfigDict, computed_field
from typing import Optional
from datetime import datetime
from uuid import UUID


class ActivityResponse(BaseModel):
    """Schema for activity log entry"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: Optional[str] = None
    details: Optional[str] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def date(self) -> Optional[datetime]:
        return self.created_at
