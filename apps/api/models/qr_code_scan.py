"""QR code scan event log."""

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class QrCodeScan(Base):
    """One recorded scan of a QR code."""

    __tablename__ = "qr_code_scans"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    qr_code_id = Column(String, ForeignKey("qr_codes.id", ondelete="CASCADE"), nullable=False, index=True)
    # Working ad space at scan time; may differ from the QR code's stored link.
    ad_space_id = Column(String, ForeignKey("ad_spaces.id", ondelete="SET NULL"), nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    location = Column(JSON, nullable=True, default=dict)
    scanned_at = Column(DateTime(timezone=True), server_default=func.now())

    qr_code = relationship("QrCode", back_populates="scan_events")
