from .user_repository import UserRepository
from .source_repository import SourceRepository
from .news_item_repository import NewsItemRepository
from .style_template_repository import StyleTemplateRepository
from .social_connection_repository import SocialConnectionRepository
from .publish_history_repository import PublishHistoryRepository

__all__ = [
    "UserRepository",
    "SourceRepository",
    "NewsItemRepository",
    "StyleTemplateRepository",
    "SocialConnectionRepository",
    "PublishHistoryRepository",
]
