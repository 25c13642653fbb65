from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .user import generate_uuid


class StyleTemplate(Base):
    __tablename__ = "style_templates"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    name = Column(String(50), nullable=False)
    examples = Column(JSON, nullable=False, default=list)
    tone = Column(Text, nullable=True)
    characteristics = Column(JSON, nullable=True, default=list)
    is_default = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="style_templates")

    def __repr__(self):
        return f"<StyleTemplate(id={self.id}, platform='{self.platform}', name='{self.name}')>"
