# models/royalty_split.py
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class RoyaltySplit(Base):
    __tablename__ = "royalty_splits"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    work_id = Column(UUID(as_uuid=True), ForeignKey("creative_works.id", ondelete="CASCADE"), nullable=False)
    recipient_address = Column(String(100), nullable=False)
    split_percentage = Column(Numeric(5, 2), nullable=False)
    split_contract_address = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work = relationship("CreativeWork", back_populates="royalty_splits")
