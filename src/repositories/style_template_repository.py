from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.style_template import StyleTemplate


class StyleTemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, **fields) -> StyleTemplate:
        template = StyleTemplate(user_id=user_id, **fields)
        if template.is_default:
            self._clear_default(user_id, template.platform)
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        return template

    def get_by_id(self, template_id: str) -> Optional[StyleTemplate]:
        return self.db.query(StyleTemplate).filter(StyleTemplate.id == template_id).first()

    def get_all_by_user(self, user_id: str, platform: Optional[str] = None) -> List[StyleTemplate]:
        query = self.db.query(StyleTemplate).filter(StyleTemplate.user_id == user_id)
        if platform:
            query = query.filter(StyleTemplate.platform == platform)
        return query.order_by(StyleTemplate.created_at.desc()).all()

    def get_default(self, user_id: str, platform: str) -> Optional[StyleTemplate]:
        return self.db.query(StyleTemplate).filter(
            StyleTemplate.user_id == user_id,
            StyleTemplate.platform == platform,
            StyleTemplate.is_default.is_(True)
        ).first()

    def update(self, template: StyleTemplate, **fields) -> StyleTemplate:
        for key, value in fields.items():
            setattr(template, key, value)
        if fields.get("is_default"):
            self._clear_default(template.user_id, template.platform, exclude_id=template.id)
        self.db.commit()
        self.db.refresh(template)
        return template

    def delete(self, template_id: str) -> bool:
        template = self.get_by_id(template_id)
        if template:
            self.db.delete(template)
            self.db.commit()
            return True
        return False

    def _clear_default(self, user_id: str, platform: str, exclude_id: Optional[str] = None) -> None:
        # One default template per user and platform
        query = self.db.query(StyleTemplate).filter(
            StyleTemplate.user_id == user_id,
            StyleTemplate.platform == platform,
            StyleTemplate.is_default.is_(True)
        )
        if exclude_id:
            query = query.filter(StyleTemplate.id != exclude_id)
        for other in query.all():
            other.is_default = False
