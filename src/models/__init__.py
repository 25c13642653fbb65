from .user import User
from .source import Source
from .news_item import NewsItem
from .style_template import StyleTemplate
from .social_connection import SocialConnection
from .publish_history import PublishHistory

__all__ = ["User", "Source", "NewsItem", "StyleTemplate", "SocialConnection", "PublishHistory"]
