import pytest


class TestNewsAPI:
    @pytest.mark.asyncio
    async def test_create_single_item(self, async_client, sample_source):
        payload = {
            "source_id": sample_source.id,
            "title": "Claude gets a new tool",
            "url": "https://www.anthropic.com/news/tool",
            "original_content": "Body",
            "quick_summary": {"bullets": ["one", "two", "three"], "category": "product"},
        }
        response = await async_client.post("/api/v1/news", json=payload)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Claude gets a new tool"
        assert data["quick_summary"]["category"] == "product"
        assert data["is_bookmarked"] is False
        assert data["media_urls"] == []

    @pytest.mark.asyncio
    async def test_create_batch(self, async_client, sample_source):
        payload = [
            {"source_id": sample_source.id, "title": f"Item {i}", "url": f"https://example.com/{i}"}
            for i in range(3)
        ]
        response = await async_client.post("/api/v1/news", json=payload)
        assert response.status_code == 201
        assert isinstance(response.json(), list)
        assert len(response.json()) == 3

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_category(self, async_client, sample_source):
        payload = {
            "source_id": sample_source.id,
            "title": "Item",
            "url": "https://example.com/a",
            "quick_summary": {"bullets": [], "category": "gossip"},
        }
        response = await async_client.post("/api/v1/news", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_rejects_empty_title_and_bad_url(self, async_client, sample_source):
        bad_title = {"source_id": sample_source.id, "title": "", "url": "https://example.com/a"}
        bad_url = {"source_id": sample_source.id, "title": "Item", "url": "example"}
        assert (await async_client.post("/api/v1/news", json=bad_title)).status_code == 400
        assert (await async_client.post("/api/v1/news", json=bad_url)).status_code == 400

    @pytest.mark.asyncio
    async def test_create_for_unknown_or_foreign_source(self, async_client, test_db, other_user):
        from src.repositories.source_repository import SourceRepository
        foreign = SourceRepository(test_db).create(other_user.user_id, name="x", website_url="https://x.com")

        missing = {"source_id": "nope", "title": "Item", "url": "https://example.com/a"}
        assert (await async_client.post("/api/v1/news", json=missing)).status_code == 404

        forbidden = {"source_id": foreign.id, "title": "Item", "url": "https://example.com/a"}
        assert (await async_client.post("/api/v1/news", json=forbidden)).status_code == 403

    @pytest.mark.asyncio
    async def test_bookmark_filter(self, async_client, sample_news_item):
        response = await async_client.patch(
            f"/api/v1/news/{sample_news_item.id}", json={"is_bookmarked": True}
        )
        assert response.status_code == 200
        assert response.json()["is_bookmarked"] is True

        bookmarked = (await async_client.get("/api/v1/news", params={"bookmarked": "true"})).json()
        assert [item["id"] for item in bookmarked] == [sample_news_item.id]

        unbookmarked = (await async_client.get("/api/v1/news", params={"bookmarked": "false"})).json()
        assert unbookmarked == []

    @pytest.mark.asyncio
    async def test_patch_translation(self, async_client, sample_news_item):
        response = await async_client.patch(
            f"/api/v1/news/{sample_news_item.id}",
            json={"translated_content": "번역된 내용", "translated_at": "2026-01-05T10:00:00Z", "is_processed": True}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["translated_content"] == "번역된 내용"
        assert data["translated_at"] is not None
        assert data["is_processed"] is True

    @pytest.mark.asyncio
    async def test_get_and_delete_item(self, async_client, sample_news_item):
        response = await async_client.get(f"/api/v1/news/{sample_news_item.id}")
        assert response.status_code == 200
        assert response.json()["url"] == "https://openai.com/blog/gpt-5"

        assert (await async_client.delete(f"/api/v1/news/{sample_news_item.id}")).status_code == 200
        assert (await async_client.get(f"/api/v1/news/{sample_news_item.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_foreign_item_is_forbidden(self, async_client, test_db, other_user):
        from src.repositories.source_repository import SourceRepository
        from src.repositories.news_item_repository import NewsItemRepository
        source = SourceRepository(test_db).create(other_user.user_id, name="x", website_url="https://x.com")
        item = NewsItemRepository(test_db).create(
            other_user.user_id, source_id=source.id, title="Theirs", url="https://x.com/1"
        )

        assert (await async_client.get(f"/api/v1/news/{item.id}")).status_code == 403
        assert (await async_client.delete(f"/api/v1/news/{item.id}")).status_code == 403

    @pytest.mark.asyncio
    async def test_delete_all_only_touches_own_items(self, async_client, test_db, sample_news_item, other_user):
        from src.models.news_item import NewsItem
        from src.repositories.source_repository import SourceRepository
        from src.repositories.news_item_repository import NewsItemRepository
        source = SourceRepository(test_db).create(other_user.user_id, name="x", website_url="https://x.com")
        NewsItemRepository(test_db).create(other_user.user_id, source_id=source.id, title="Theirs", url="https://x.com/1")

        response = await async_client.delete("/api/v1/news")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        test_db.expire_all()
        remaining = test_db.query(NewsItem).all()
        assert [item.user_id for item in remaining] == [other_user.user_id]

    @pytest.mark.asyncio
    async def test_publish_history_for_item(self, async_client, test_db, mock_current_user, sample_news_item):
        from src.repositories.publish_history_repository import PublishHistoryRepository
        PublishHistoryRepository(test_db).create(
            mock_current_user.user_id,
            sample_news_item.id,
            "Posted text",
            [{"platform": "bluesky", "success": True, "post_url": "https://bsky.app/profile/a/post/1"}],
        )

        response = await async_client.get(f"/api/v1/news/{sample_news_item.id}/publish-history")
        assert response.status_code == 200
        history = response.json()
        assert len(history) == 1
        assert history[0]["results"][0]["platform"] == "bluesky"
        assert history[0]["results"][0]["success"] is True
