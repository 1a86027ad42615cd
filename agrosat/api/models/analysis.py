from sqlalchemy import Column, Float, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
import uuid

from agrosat.api.core.database import Base


class Analysis(Base):
    __tablename__ = "analyses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    field_id = Column(UUID(as_uuid=True), ForeignKey("fields.id", ondelete="CASCADE"), nullable=False, index=True)
    ndvi_average = Column(Float)
    healthy_percent = Column(Float)
    moderate_percent = Column(Float)
    stressed_percent = Column(Float)
    weather_data = Column(JSONB)
    ai_insight = Column(JSONB)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Analysis {self.field_id} - {self.ndvi_average}>"
