# models/license_offering.py
from sqlalchemy import Column, String, Text, Integer, Numeric, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class LicenseOffering(Base):
    __tablename__ = "license_offerings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    work_id = Column(UUID(as_uuid=True), ForeignKey("creative_works.id", ondelete="CASCADE"), nullable=False)
    license_type = Column(String(50), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    price_idr = Column(Numeric(18, 2), nullable=False)
    usage_limit = Column(Integer)
    duration_days = Column(Integer)
    terms = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    work = relationship("CreativeWork", back_populates="offerings")

    __table_args__ = (
        CheckConstraint("price_idr >= 0", name="non_negative_price"),
    )
