from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.source import Source


class SourceRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, **fields) -> Source:
        source = Source(user_id=user_id, **fields)
        self.db.add(source)
        self.db.commit()
        self.db.refresh(source)
        return source

    def get_by_id(self, source_id: str) -> Optional[Source]:
        return self.db.query(Source).filter(Source.id == source_id).first()

    def get_all_by_user(self, user_id: str, active_only: bool = False) -> List[Source]:
        query = self.db.query(Source).filter(Source.user_id == user_id)
        if active_only:
            query = query.filter(Source.is_active.is_(True))
        return query.order_by(Source.created_at.desc()).all()

    def update(self, source: Source, **fields) -> Source:
        for key, value in fields.items():
            setattr(source, key, value)
        self.db.commit()
        self.db.refresh(source)
        return source

    def delete(self, source_id: str) -> bool:
        source = self.get_by_id(source_id)
        if source:
            self.db.delete(source)
            self.db.commit()
            return True
        return False

    def mark_fetched(self, source: Source) -> Source:
        source.last_fetched_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(source)
        return source
