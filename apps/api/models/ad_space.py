"""AdSpace model for public landing pages."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class AdSpace(Base):
    """Landing-page record a QR code or ad link points at."""

    __tablename__ = "ad_spaces"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(JSON, nullable=True, default=dict)  # url, headline, subheadline
    theme = Column(JSON, nullable=True, default=dict)  # backgroundColor, textColor
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="ad_spaces")
    qr_codes = relationship("QrCode", back_populates="ad_space")
