from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .user import generate_uuid


class SocialConnection(Base):
    __tablename__ = "social_connections"
    __table_args__ = (
        UniqueConstraint("user_id", "platform", name="uq_social_connections_user_platform"),
    )

    id = Column(String, primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    handle = Column(String, nullable=False)
    is_connected = Column(Boolean, nullable=False, default=True)
    connected_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # identifier/app_password for Bluesky, access_token/refresh_token/expires_at for OAuth platforms
    credentials = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="social_connections")

    def __repr__(self):
        return f"<SocialConnection(platform='{self.platform}', handle='{self.handle}')>"

    def credential(self, key: str):
        return (self.credentials or {}).get(key)
