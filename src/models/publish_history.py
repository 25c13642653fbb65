from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .user import generate_uuid


class PublishHistory(Base):
    __tablename__ = "publish_history"

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    news_item_id = Column(String, ForeignKey("news_items.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # [{platform, success, post_id?, post_url?, error?, published_at}]
    results = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="publish_history")
    news_item = relationship("NewsItem", back_populates="publish_history")

    @property
    def succeeded_platforms(self):
        return [r["platform"] for r in self.results or [] if r.get("success")]
