from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .enums import Priority, SourceType
from .user import generate_uuid


class Source(Base):
    __tablename__ = "sources"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(200), nullable=True)
    logo_url = Column(Text, nullable=True)
    rss_url = Column(Text, nullable=True)
    website_url = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_fetched_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    type = Column(String(20), nullable=False, default=SourceType.RSS.value)
    # {article_selector, title_selector, link_selector, description_selector?, date_selector?}
    scrape_config = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="sources")
    news_items = relationship("NewsItem", back_populates="source", cascade="all, delete")

    def __repr__(self):
        return f"<Source(id={self.id}, name='{self.name}', type='{self.type}')>"
