import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from src.exceptions import ServiceNotConfiguredError, SocialAuthError, SocialPlatformError, ValidationError
from src.repositories.publish_history_repository import PublishHistoryRepository
from src.repositories.social_connection_repository import SocialConnectionRepository
from src.services.social.linkedin import LinkedInAuth
from src.services.social.publisher import (
    MANUAL_ONLY_MESSAGE,
    SocialPublisher,
    get_oauth_client,
    publish_result,
)


@pytest.fixture
def publisher(test_db):
    return SocialPublisher(SocialConnectionRepository(test_db), PublishHistoryRepository(test_db), poll_interval=0)


class TestResolveCredentials:
    def test_stored_credentials_overlaid_by_supplied(self, publisher, test_db, mock_current_user):
        SocialConnectionRepository(test_db).upsert(
            mock_current_user.user_id, "threads", "newsbot",
            credentials={"access_token": "stored", "user_id": "1"}
        )

        credentials = publisher.resolve_credentials(
            mock_current_user.user_id, "threads", {"access_token": "fresh", "user_id": None}
        )

        assert credentials == {"access_token": "fresh", "user_id": "1"}

    def test_disconnected_connection_is_ignored(self, publisher, test_db, mock_current_user):
        repo = SocialConnectionRepository(test_db)
        connection = repo.upsert(
            mock_current_user.user_id, "linkedin", "Jamie",
            credentials={"access_token": "t", "person_urn": "urn:li:person:1"}
        )
        repo.disconnect(connection)

        with pytest.raises(SocialAuthError) as exc_info:
            publisher.resolve_credentials(mock_current_user.user_id, "linkedin")
        assert "Not authenticated with linkedin" in exc_info.value.message


class TestPublish:
    @pytest.mark.asyncio
    async def test_publish_records_success_and_failures(self, publisher, test_db, mock_current_user, sample_news_item):
        SocialConnectionRepository(test_db).upsert(
            mock_current_user.user_id, "linkedin", "Jamie",
            credentials={"access_token": "t", "person_urn": "urn:li:person:1"}
        )
        SocialConnectionRepository(test_db).upsert(
            mock_current_user.user_id, "instagram", "newsbot",
            credentials={"access_token": "t", "user_id": "9"}
        )

        with patch("src.services.social.publisher.LinkedInClient") as linkedin_cls, \
                patch("src.services.social.publisher.InstagramClient") as instagram_cls:
            linkedin_cls.return_value.create_post = AsyncMock(
                return_value={"id": "urn:li:share:1", "post_url": "https://www.linkedin.com/feed/update/urn:li:share:1"}
            )
            instagram_cls.return_value.create_post = AsyncMock(
                side_effect=ValidationError("Image URL is required for Instagram posts")
            )

            record = await publisher.publish(
                mock_current_user.user_id,
                sample_news_item.id,
                "Post body",
                ["linkedin", "instagram", "twitter"],
                {"article_url": sample_news_item.url, "article_title": sample_news_item.title},
            )

        results = {r["platform"]: r for r in record.results}
        assert results["linkedin"]["success"] is True
        assert results["linkedin"]["post_id"] == "urn:li:share:1"
        assert results["instagram"]["error"] == "Image URL is required for Instagram posts"
        assert results["twitter"] == {
            "platform": "twitter",
            "success": False,
            "published_at": results["twitter"]["published_at"],
            "error": MANUAL_ONLY_MESSAGE,
        }
        assert record.succeeded_platforms == ["linkedin"]
        instagram_cls.assert_called_once_with("t", "9", poll_interval=0)
        linkedin_cls.return_value.create_post.assert_awaited_once_with(
            "Post body",
            article_url=sample_news_item.url,
            article_title=sample_news_item.title,
            article_description=None,
            visibility="PUBLIC",
        )
        assert PublishHistoryRepository(test_db).get_all_by_user(mock_current_user.user_id)[0].id == record.id

    @pytest.mark.asyncio
    async def test_publish_records_unexpected_client_error(self, publisher, test_db, mock_current_user, sample_news_item):
        SocialConnectionRepository(test_db).upsert(
            mock_current_user.user_id, "linkedin", "Jamie",
            credentials={"access_token": "t", "person_urn": "urn:li:person:1"}
        )

        with patch("src.services.social.publisher.LinkedInClient") as linkedin_cls:
            linkedin_cls.return_value.create_post = AsyncMock(side_effect=ValueError("bad json"))

            record = await publisher.publish(
                mock_current_user.user_id, sample_news_item.id, "Post body", ["linkedin", "twitter"], {}
            )

        results = {r["platform"]: r for r in record.results}
        assert results["linkedin"]["success"] is False
        assert results["linkedin"]["error"].startswith("Unexpected error")
        assert results["twitter"]["error"] == MANUAL_ONLY_MESSAGE
        history = PublishHistoryRepository(test_db).get_all_by_user(mock_current_user.user_id)
        assert [h.id for h in history] == [record.id]

    @pytest.mark.asyncio
    async def test_post_to_unsupported_platform(self, publisher):
        with pytest.raises(ValidationError):
            await publisher.post("myspace", {}, "Hello")


class TestHelpers:
    def test_publish_result(self):
        result = publish_result("bluesky", True, post={"uri": "at://x/1", "post_url": "https://bsky.app/p/1"})
        assert result["post_id"] == "at://x/1"
        assert result["post_url"] == "https://bsky.app/p/1"
        assert "error" not in result

    def test_get_oauth_client(self):
        settings = MagicMock()
        settings.linkedin_client_id = "id"
        settings.linkedin_client_secret = "secret"
        settings.linkedin_redirect_uri = "https://app.example.com/cb"
        assert isinstance(get_oauth_client("linkedin", settings), LinkedInAuth)

        settings.threads_app_id = None
        with pytest.raises(ServiceNotConfiguredError):
            get_oauth_client("threads", settings)
        with pytest.raises(ValidationError):
            get_oauth_client("bluesky", settings)

    def test_auth_error_is_platform_error(self):
        assert issubclass(SocialAuthError, SocialPlatformError)
