import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base


def utcnow():
    return datetime.now(timezone.utc)


class Property(Base):
    __tablename__ = "properties"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)
    price = Column(Float, nullable=False, index=True)
    state = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    location = Column(String(255), default="")
    area_sq_ft = Column(Float, nullable=False)
    area = Column(Float, default=0.0)
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Integer, nullable=False)
    amenities = Column(JSONB, default=list)
    features = Column(JSONB, default=list)
    tags = Column(JSONB, default=list)
    furnished = Column(String(50), default="")
    available_from = Column(String(50), default="")
    listed_by = Column(String(50), default="")
    color_theme = Column(String(50), default="")
    rating = Column(Float, default=0.0)
    is_verified = Column(Boolean, default=False, nullable=False)
    listing_type = Column(String(50), default="")
    status = Column(String(50), default="")
    description = Column(Text, default="")
    # Owner of the listing; never rewritten after insert
    created_by = Column(UUID(as_uuid=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
