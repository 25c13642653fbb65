import pytest
from unittest.mock import MagicMock, AsyncMock
import httpx


@pytest.fixture
def mock_llm_service():
    service = MagicMock()
    service.generate_json = AsyncMock(return_value={})
    service.generate_with_fallback = AsyncMock(return_value="")
    service.supports_image_generation = MagicMock(return_value=False)
    return service


@pytest.fixture
def mock_httpx_response():
    def build(status_code=200, json_data=None, headers=None, text=None):
        response = MagicMock(spec=httpx.Response)
        response.status_code = status_code
        response.headers = headers or {}
        response.json = MagicMock(return_value=json_data if json_data is not None else {})
        response.text = text if text is not None else ""
        response.content = (text or "").encode("utf-8") if json_data is None else b"{}"
        return response
    return build


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine, event
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from src.core.database import Base
    from src import models  # noqa: F401

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_current_user(test_db):
    from src.models.user import User
    user = User(
        user_id="test_user_id",
        email="test@example.com",
        display_name="Test User",
        firebase_uid="test_firebase_uid"
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def other_user(test_db):
    from src.models.user import User
    user = User(
        user_id="other_user_id",
        email="other@example.com",
        display_name="Other User",
        firebase_uid="other_firebase_uid"
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def sample_source(test_db, mock_current_user):
    from src.repositories.source_repository import SourceRepository
    return SourceRepository(test_db).create(
        mock_current_user.user_id,
        name="OpenAI Blog",
        website_url="https://openai.com/blog",
        rss_url="https://openai.com/blog/rss.xml",
    )


@pytest.fixture
def sample_news_item(test_db, mock_current_user, sample_source):
    from src.repositories.news_item_repository import NewsItemRepository
    return NewsItemRepository(test_db).create(
        mock_current_user.user_id,
        source_id=sample_source.id,
        title="GPT-5 released",
        original_content="OpenAI released a new model today.",
        url="https://openai.com/blog/gpt-5",
    )


@pytest.fixture
async def async_client(test_db, mock_current_user, mock_llm_service):
    from httpx import AsyncClient, ASGITransport
    from src.main import app
    from src.core.database import get_db
    from src.api.dependencies import get_current_user_conditional, get_llm_service

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_conditional] = lambda: mock_current_user
    app.dependency_overrides[get_llm_service] = lambda: mock_llm_service

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
