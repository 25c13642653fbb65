from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.social_connection import SocialConnection


class SocialConnectionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all_by_user(self, user_id: str) -> List[SocialConnection]:
        return self.db.query(SocialConnection).filter(
            SocialConnection.user_id == user_id
        ).order_by(SocialConnection.created_at.desc()).all()

    def get_by_platform(self, user_id: str, platform: str) -> Optional[SocialConnection]:
        return self.db.query(SocialConnection).filter(
            SocialConnection.user_id == user_id,
            SocialConnection.platform == platform
        ).first()

    def upsert(
        self,
        user_id: str,
        platform: str,
        handle: str,
        is_connected: bool = True,
        credentials: Optional[Dict[str, Any]] = None,
    ) -> SocialConnection:
        connection = self.get_by_platform(user_id, platform)
        if connection is None:
            connection = SocialConnection(user_id=user_id, platform=platform)
            self.db.add(connection)

        connection.handle = handle
        connection.is_connected = is_connected
        connection.connected_at = datetime.now(timezone.utc)
        if credentials is not None:
            connection.credentials = credentials

        self.db.commit()
        self.db.refresh(connection)
        return connection

    def update_credentials(self, connection: SocialConnection, **values) -> SocialConnection:
        # JSON columns are not mutation-tracked, so assign a new dict
        merged = dict(connection.credentials or {})
        merged.update(values)
        connection.credentials = merged
        self.db.commit()
        self.db.refresh(connection)
        return connection

    def disconnect(self, connection: SocialConnection) -> SocialConnection:
        connection.is_connected = False
        connection.credentials = None
        self.db.commit()
        self.db.refresh(connection)
        return connection

    def delete(self, user_id: str, platform: str) -> bool:
        connection = self.get_by_platform(user_id, platform)
        if connection:
            self.db.delete(connection)
            self.db.commit()
            return True
        return False
