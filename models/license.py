# models/license.py
from sqlalchemy import Column, Integer, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class License(Base):
    """A sold license. One row per completed order, never updated afterwards."""
    __tablename__ = "licenses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), unique=True, nullable=False)
    license_offering_id = Column(UUID(as_uuid=True), ForeignKey("license_offerings.id", ondelete="SET NULL"))
    work_id = Column(UUID(as_uuid=True), ForeignKey("creative_works.id", ondelete="SET NULL"))
    buyer_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False)
    price_idr = Column(Numeric(18, 2), nullable=False)
    purchased_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True))
    usage_limit = Column(Integer)
    usage_count = Column(Integer, default=0)
    nft_token_id = Column(Text)
    nft_transaction_hash = Column(Text)

    # Relationships
    offering = relationship("LicenseOffering")
    work = relationship("CreativeWork")
    buyer = relationship("Profile")
    distributions = relationship("RoyaltyDistribution", back_populates="license", cascade="all, delete-orphan")
