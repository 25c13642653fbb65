from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .enums import Priority
from .user import generate_uuid


class NewsItem(Base):
    __tablename__ = "news_items"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    source_id = Column(String, ForeignKey("sources.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    original_content = Column(Text, nullable=False, default="")
    url = Column(Text, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    is_processed = Column(Boolean, nullable=False, default=False)
    is_bookmarked = Column(Boolean, nullable=False, default=False)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    media_urls = Column(JSON, nullable=True, default=list)
    # {bullets: [...], category, created_at}
    quick_summary = Column(JSON, nullable=True)
    translated_content = Column(Text, nullable=True)
    translated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="news_items")
    source = relationship("Source", back_populates="news_items")
    publish_history = relationship("PublishHistory", back_populates="news_item", cascade="all, delete")

    def __repr__(self):
        return f"<NewsItem(id={self.id}, title='{self.title[:50]}...')>"
