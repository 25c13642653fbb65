import uuid
from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .enums import Theme

def generate_uuid():
    return str(uuid.uuid4())

class User(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True, default=generate_uuid)
    firebase_uid = Column(String, nullable=True, unique=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=False)
    photo_url = Column(String, nullable=True)
    theme = Column(String(20), nullable=False, default=Theme.SYSTEM.value)
    auto_summarize = Column(Boolean, nullable=False, default=True)
    last_read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    sources = relationship("Source", back_populates="user", cascade="all, delete")
    news_items = relationship("NewsItem", back_populates="user", cascade="all, delete")
    style_templates = relationship("StyleTemplate", back_populates="user", cascade="all, delete")
    social_connections = relationship("SocialConnection", back_populates="user", cascade="all, delete")
    publish_history = relationship("PublishHistory", back_populates="user", cascade="all, delete")

    def __repr__(self):
        return f"<User(user_id={self.user_id}, email='{self.email}')>"
