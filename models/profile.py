# models/profile.py
from sqlalchemy import Column, String, Text, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(320), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    username = Column(String(50), unique=True, nullable=False)
    full_name = Column(String(200))
    role = Column(String(20), nullable=False, default="creator")
    wallet_address = Column(String(100))
    avatar_url = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    works = relationship("CreativeWork", back_populates="creator")

    __table_args__ = (
        CheckConstraint("role IN ('creator', 'buyer', 'admin')", name="valid_role"),
    )
