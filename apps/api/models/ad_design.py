"""AdDesign model for uploaded creatives."""

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class AdDesign(Base):
    """Image/video creative loosely linked to an ad space."""

    __tablename__ = "ad_designs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    # Not a strict 1:1 link; may be null or stale (see services.view_resolution).
    ad_space_id = Column(String, ForeignKey("ad_spaces.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String, nullable=False, default="Untitled design")
    template_id = Column(String, nullable=True)
    background = Column(String, nullable=True, default="#FFFFFF")
    image_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    content = Column(JSON, nullable=True, default=dict)  # redirectUrl, mediaType, headline
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="ad_designs")
