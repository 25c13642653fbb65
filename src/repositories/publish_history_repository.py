from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ..models.publish_history import PublishHistory


class PublishHistoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, news_item_id: str, content: str, results: List[Dict[str, Any]]) -> PublishHistory:
        record = PublishHistory(
            user_id=user_id,
            news_item_id=news_item_id,
            content=content,
            results=results
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get_by_news_item(self, news_item_id: str) -> List[PublishHistory]:
        return self.db.query(PublishHistory).filter(
            PublishHistory.news_item_id == news_item_id
        ).order_by(PublishHistory.created_at.desc()).all()

    def get_all_by_user(self, user_id: str, limit: int = 50) -> List[PublishHistory]:
        return self.db.query(PublishHistory).filter(
            PublishHistory.user_id == user_id
        ).order_by(PublishHistory.created_at.desc()).limit(limit).all()
