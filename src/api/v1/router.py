from fastapi import APIRouter

from .endpoints import health, auth, users, sources, news, templates, social, publish
from .endpoints import ai, images, rss, scrape, youtube

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])

# Dashboard data (per-user CRUD)
api_router.include_router(sources.router, prefix="/sources", tags=["sources"])
api_router.include_router(news.router, prefix="/news", tags=["news"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])

# Social accounts and publishing
api_router.include_router(social.router, prefix="/social", tags=["social"])
api_router.include_router(publish.router, prefix="/publish", tags=["publish"])

# AI content and images (/ai, /headline, /image)
api_router.include_router(ai.router, tags=["ai"])
api_router.include_router(images.router, tags=["images"])

# Collection (/rss, /scrape*, /youtube*)
api_router.include_router(rss.router, tags=["collection"])
api_router.include_router(scrape.router, tags=["collection"])
api_router.include_router(youtube.router, tags=["collection"])
