# models/royalty_distribution.py
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class RoyaltyDistribution(Base):
    """One recipient's share of one sale, frozen at the split in force when it was paid."""
    __tablename__ = "royalty_distributions"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed', 'failed')", name="royalty_distributions_status_check"),
        CheckConstraint("amount_idr >= 0", name="royalty_distributions_amount_check"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    license_id = Column(UUID(as_uuid=True), ForeignKey("licenses.id", ondelete="CASCADE"), nullable=False)
    recipient_address = Column(String(100), nullable=False)
    split_percentage = Column(Numeric(5, 2), nullable=False)
    amount_idr = Column(Numeric(18, 2), nullable=False)
    status = Column(String(20), nullable=False, default="completed")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    license = relationship("License", back_populates="distributions")
