"""User model."""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class User(Base):
    """Business account that owns ad spaces, designs and QR codes."""
    
    __tablename__ = "users"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False, index=True)
    business_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    ad_spaces = relationship("AdSpace", back_populates="user", cascade="all, delete-orphan")
    ad_designs = relationship("AdDesign", back_populates="user", cascade="all, delete-orphan")
    qr_codes = relationship("QrCode", back_populates="user", cascade="all, delete-orphan")
