"""QR code model."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class QrCode(Base):
    """Printed QR code mapping a scannable id to a destination."""

    __tablename__ = "qr_codes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String, nullable=False, default="QR code")
    url = Column(Text, nullable=False)
    design = Column(JSON, nullable=True, default=dict)
    scans = Column(Integer, nullable=False, default=0)
    ad_space_id = Column(String, ForeignKey("ad_spaces.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="qr_codes")
    ad_space = relationship("AdSpace", back_populates="qr_codes")
    scan_events = relationship("QrCodeScan", back_populates="qr_code", cascade="all, delete-orphan")
