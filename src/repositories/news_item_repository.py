from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.news_item import NewsItem


class NewsItemRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, **fields) -> NewsItem:
        item = NewsItem(user_id=user_id, **fields)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def create_many(self, user_id: str, items: List[Dict[str, Any]]) -> List[NewsItem]:
        if not items:
            return []

        created = [NewsItem(user_id=user_id, **fields) for fields in items]
        self.db.add_all(created)
        self.db.commit()
        for item in created:
            self.db.refresh(item)
        return created

    def get_by_id(self, item_id: str) -> Optional[NewsItem]:
        return self.db.query(NewsItem).filter(NewsItem.id == item_id).first()

    def get_all_by_user(
        self,
        user_id: str,
        source_id: Optional[str] = None,
        bookmarked: Optional[bool] = None,
    ) -> List[NewsItem]:
        query = self.db.query(NewsItem).filter(NewsItem.user_id == user_id)
        if source_id:
            query = query.filter(NewsItem.source_id == source_id)
        if bookmarked is not None:
            query = query.filter(NewsItem.is_bookmarked.is_(bookmarked))
        return query.order_by(NewsItem.created_at.desc()).all()

    def get_urls_by_user(self, user_id: str) -> set:
        rows = self.db.query(NewsItem.url).filter(NewsItem.user_id == user_id).all()
        return {row[0] for row in rows}

    def exists_by_url(self, user_id: str, url: str) -> bool:
        return self.db.query(NewsItem.id).filter(
            NewsItem.user_id == user_id,
            NewsItem.url == url
        ).first() is not None

    def update(self, item: NewsItem, **fields) -> NewsItem:
        for key, value in fields.items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: str) -> bool:
        item = self.get_by_id(item_id)
        if item:
            self.db.delete(item)
            self.db.commit()
            return True
        return False

    def delete_all_by_user(self, user_id: str) -> int:
        # Per-row delete so publish history cascades through the ORM
        items = self.db.query(NewsItem).filter(NewsItem.user_id == user_id).all()
        for item in items:
            self.db.delete(item)
        self.db.commit()
        return len(items)
