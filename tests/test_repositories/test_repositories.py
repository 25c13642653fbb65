import pytest

from src.exceptions import ValidationError
from src.models.publish_history import PublishHistory
from src.repositories import (
    NewsItemRepository,
    PublishHistoryRepository,
    SocialConnectionRepository,
    SourceRepository,
    StyleTemplateRepository,
    UserRepository,
)


class TestUserRepository:
    def test_duplicate_email_rejected(self, test_db, mock_current_user):
        repo = UserRepository(test_db)
        with pytest.raises(ValidationError) as exc_info:
            repo.create(email="TEST@example.com", display_name="Again")
        assert str(exc_info.value) == "Email already registered"

    def test_create_lowercases_email(self, test_db):
        user = UserRepository(test_db).create(email="New@Example.com", display_name="New", firebase_uid="fb-1")
        assert user.email == "new@example.com"
        assert UserRepository(test_db).get_by_firebase_uid("fb-1").user_id == user.user_id

    def test_update_settings_ignores_unknown_fields(self, test_db, mock_current_user):
        user = UserRepository(test_db).update_settings(mock_current_user, theme="dark", email="hacker@example.com")
        assert user.theme == "dark"
        assert user.email == "test@example.com"

    def test_last_read(self, test_db, mock_current_user):
        repo = UserRepository(test_db)
        assert repo.get_last_read_at(mock_current_user.user_id) is None
        stamped = repo.update_last_read_at(mock_current_user)
        assert repo.get_last_read_at(mock_current_user.user_id) == stamped
        assert repo.get_last_read_at("missing") is None


class TestSourceRepository:
    def test_active_only(self, test_db, mock_current_user, sample_source):
        repo = SourceRepository(test_db)
        repo.create(mock_current_user.user_id, name="Paused", website_url="https://example.com", is_active=False)

        assert len(repo.get_all_by_user(mock_current_user.user_id)) == 2
        assert [s.id for s in repo.get_all_by_user(mock_current_user.user_id, active_only=True)] == [sample_source.id]

    def test_delete_cascades_to_items_and_history(self, test_db, mock_current_user, sample_source, sample_news_item):
        PublishHistoryRepository(test_db).create(mock_current_user.user_id, sample_news_item.id, "Post", [])

        assert SourceRepository(test_db).delete(sample_source.id) is True

        assert NewsItemRepository(test_db).get_all_by_user(mock_current_user.user_id) == []
        assert test_db.query(PublishHistory).count() == 0
        assert SourceRepository(test_db).delete(sample_source.id) is False


class TestNewsItemRepository:
    def test_urls_and_filters(self, test_db, mock_current_user, sample_source, sample_news_item):
        repo = NewsItemRepository(test_db)
        repo.create_many(mock_current_user.user_id, [
            {"source_id": sample_source.id, "title": "Second", "url": "https://openai.com/blog/second",
             "is_bookmarked": True},
        ])

        assert repo.get_urls_by_user(mock_current_user.user_id) == {
            "https://openai.com/blog/gpt-5", "https://openai.com/blog/second"
        }
        assert repo.exists_by_url(mock_current_user.user_id, sample_news_item.url)
        assert not repo.exists_by_url("other_user_id", sample_news_item.url)
        bookmarked = repo.get_all_by_user(mock_current_user.user_id, bookmarked=True)
        assert [i.title for i in bookmarked] == ["Second"]

    def test_delete_all_by_user(self, test_db, mock_current_user, other_user, sample_news_item):
        other_source = SourceRepository(test_db).create(other_user.user_id, name="X", website_url="https://x.ai")
        NewsItemRepository(test_db).create(other_user.user_id, source_id=other_source.id, title="T", url="https://x.ai/1")

        assert NewsItemRepository(test_db).delete_all_by_user(mock_current_user.user_id) == 1
        assert len(NewsItemRepository(test_db).get_all_by_user(other_user.user_id)) == 1


class TestStyleTemplateRepository:
    def test_single_default_per_platform(self, test_db, mock_current_user):
        repo = StyleTemplateRepository(test_db)
        first = repo.create(mock_current_user.user_id, platform="twitter", name="Punchy", examples=["a"], is_default=True)
        repo.create(mock_current_user.user_id, platform="linkedin", name="Formal", examples=["b"], is_default=True)
        second = repo.create(mock_current_user.user_id, platform="twitter", name="Calm", examples=["c"], is_default=True)

        test_db.refresh(first)
        assert first.is_default is False
        assert repo.get_default(mock_current_user.user_id, "twitter").id == second.id
        assert repo.get_default(mock_current_user.user_id, "linkedin").name == "Formal"

        repo.update(first, is_default=True)
        test_db.refresh(second)
        assert second.is_default is False
        assert len(repo.get_all_by_user(mock_current_user.user_id, platform="twitter")) == 2


class TestSocialConnectionRepository:
    def test_upsert_is_keyed_on_platform(self, test_db, mock_current_user):
        repo = SocialConnectionRepository(test_db)
        first = repo.upsert(mock_current_user.user_id, "bluesky", "a.bsky.social", credentials={"app_password": "x"})
        second = repo.upsert(mock_current_user.user_id, "bluesky", "b.bsky.social")

        assert first.id == second.id
        assert second.handle == "b.bsky.social"
        assert second.credentials == {"app_password": "x"}

    def test_update_credentials_merges(self, test_db, mock_current_user):
        repo = SocialConnectionRepository(test_db)
        connection = repo.upsert(mock_current_user.user_id, "threads", "bot", credentials={"access_token": "a", "user_id": "1"})

        repo.update_credentials(connection, access_token="b")

        assert repo.get_by_platform(mock_current_user.user_id, "threads").credentials == {"access_token": "b", "user_id": "1"}

    def test_disconnect_clears_credentials(self, test_db, mock_current_user):
        repo = SocialConnectionRepository(test_db)
        connection = repo.upsert(mock_current_user.user_id, "linkedin", "Jamie", credentials={"access_token": "a"})

        repo.disconnect(connection)

        assert connection.is_connected is False
        assert connection.credentials is None
        assert repo.delete(mock_current_user.user_id, "linkedin") is True
        assert repo.get_all_by_user(mock_current_user.user_id) == []
