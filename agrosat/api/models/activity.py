from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid

from agrosat.api.core.database import Base

# Activity categories
ACTIVITY_CREATE_FIELD = "create_field"
ACTIVITY_DELETE_FIELD = "delete_field"
ACTIVITY_ANALYSIS = "analysis"


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    type = Column(String(50))
    details = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ActivityLog {self.type}>"
