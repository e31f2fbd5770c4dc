import os
import sys
import pytest
import jwt
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Add the backend directory to the Python path
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-0123456789abcdef0123456789"

# main builds a module-level app, which needs a signing secret
os.environ.setdefault("JWT_SECRET", TEST_JWT_SECRET)

from database import Database, create_db_engine, get_db
from config.env import Settings, CompletionConfig, StorageConfig
from models.base import Base
from models.user import User
from models.set import FlashcardSet
from models.flashcard import Flashcard
from models.sharing import Collaborator
from main import create_app
from routers.dependencies import get_blob_store, get_completion_client
from utils.completion import CompletionError
from utils.s3 import S3BlobStore

class FakeCompletionClient:
    """Completion client returning canned responses and recording prompts."""

    def __init__(self):
        self.enabled = True
        self.responses = []
        self.error = None
        self.prompts = []

    async def complete(self, prompt, system=None, temperature=None):
        self.prompts.append(prompt)
        if self.error:
            raise CompletionError(self.error)
        return self.responses.pop(0) if self.responses else ""

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        jwt_secret=TEST_JWT_SECRET,
        frontend_url="http://localhost:3000",
        log_dir=str(tmp_path / "logs"),
        completion=CompletionConfig(api_key=None),
        storage=StorageConfig(bucket_name="test-bucket", region="us-east-1", max_upload_size_mb=1)
    )

@pytest.fixture
def database():
    # In-memory engine shared by every session through a static pool
    db = Database(engine=create_db_engine(SQLALCHEMY_DATABASE_URL))
    Base.metadata.create_all(bind=db.engine)
    yield db
    Base.metadata.drop_all(bind=db.engine)
    db.dispose()

@pytest.fixture
def test_db(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def fake_completion():
    return FakeCompletionClient()

@pytest.fixture
def s3_client():
    return MagicMock()

@pytest.fixture
def client(test_db, database, test_settings, fake_completion, s3_client):
    app = create_app(test_settings, database)

    # Override the get_db dependency
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: fake_completion if fake_completion.enabled else None
    app.dependency_overrides[get_blob_store] = lambda: S3BlobStore(test_settings.storage, client=s3_client)

    # Create test client
    with TestClient(app) as test_client:
        yield test_client

    # Clear dependency override after test
    app.dependency_overrides.clear()

def make_token(user_id, email=None, expires_in=timedelta(hours=1), secret=TEST_JWT_SECRET):
    claims = {
        "sub": user_id,
        "email": email if email is not None else f"{user_id}@example.com",
        "exp": datetime.now(UTC) + expires_in
    }
    return jwt.encode(claims, secret, algorithm="HS256")

def auth(user_id, **kwargs):
    """Authorization header for a user id."""
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}

@pytest.fixture
def make_user(test_db):
    def _make_user(user_id, username=None, email=None):
        user = User(
            id=user_id,
            email=email if email is not None else f"{user_id}@example.com",
            username=username or user_id
        )
        test_db.add(user)
        test_db.commit()
        return user
    return _make_user

@pytest.fixture
def make_set(test_db):
    def _make_set(owner_id, title="Test Set", is_public=False, cards=(), tags=None):
        flashcard_set = FlashcardSet(
            owner_id=owner_id,
            title=title,
            is_public=is_public,
            tags=list(tags or [])
        )
        for term, description in cards:
            flashcard_set.flashcards.append(Flashcard(term=term, description=description))
        test_db.add(flashcard_set)
        test_db.commit()
        test_db.refresh(flashcard_set)
        return flashcard_set
    return _make_set

@pytest.fixture
def grant(test_db):
    def _grant(set_id, user_id, permission):
        collaborator = Collaborator(set_id=set_id, user_id=user_id, permission=permission)
        test_db.add(collaborator)
        test_db.commit()
        return collaborator
    return _grant
