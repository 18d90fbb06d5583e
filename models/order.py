# models/order.py
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    buyer_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False)
    license_offering_id = Column(UUID(as_uuid=True), ForeignKey("license_offerings.id", ondelete="SET NULL"))
    amount_idr = Column(Numeric(18, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    payment_method = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    offering = relationship("LicenseOffering")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'paid', 'completed', 'failed')", name="valid_order_status"),
    )
