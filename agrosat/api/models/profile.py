from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func

from agrosat.api.core.database import Base

DEFAULT_PROFILE_SETTINGS = {"units": "metric", "notifications": True, "theme": "light"}


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the auth provider's user
    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String)
    name = Column(String)
    role = Column(String, default="farmer")
    settings = Column(JSONB, default=lambda: dict(DEFAULT_PROFILE_SETTINGS))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Profile {self.email}>"
