"""Test fixtures for the Product Reviews Design backend."""

import io
import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from PIL import Image
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("JWT_SECRET_KEY", "reviews-dev-jwt-secret-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RUN_STARTUP_TASKS"] = "false"

from reviews_design.auth import MANAGE_STORE, MODERATE_COMMENTS, CurrentUser, TokenPayload
from reviews_design.config import settings
from reviews_design.database import get_db
from reviews_design.main import app
from reviews_design.models import ContentItem, ContentItemType, Review
from reviews_design.schemas.settings import ReviewSettings
from reviews_design.services.media import MediaStore
from reviews_design.services.options import save_review_settings
from reviews_design.services.uploads import FileDescriptor, TransportError


# ============================================================================
# Auth Fixtures
# ============================================================================


def create_test_token(user_id: str | None = None, capabilities: list[str] | None = None) -> str:
    payload = {
        "sub": user_id or str(uuid4()),
        "exp": (datetime.now(timezone.utc) + timedelta(hours=1)).timestamp(),
    }
    if capabilities is not None:
        payload["capabilities"] = capabilities
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def make_user(capabilities: list[str] | None = None) -> CurrentUser:
    return CurrentUser(
        id=uuid4(),
        token_payload=TokenPayload(
            sub=str(uuid4()),
            exp=datetime.now(timezone.utc) + timedelta(hours=1),
            capabilities=capabilities or [],
        ),
    )


@pytest.fixture
def customer_headers():
    return {"Authorization": f"Bearer {create_test_token()}"}


@pytest.fixture
def moderator_headers():
    return {"Authorization": f"Bearer {create_test_token(capabilities=[MODERATE_COMMENTS])}"}


@pytest.fixture
def manager_headers():
    return {"Authorization": f"Bearer {create_test_token(capabilities=[MANAGE_STORE])}"}


@pytest.fixture
def moderator() -> CurrentUser:
    return make_user([MODERATE_COMMENTS])


@pytest.fixture
def customer() -> CurrentUser:
    return make_user()


# ============================================================================
# Database Fixtures
# ============================================================================


def _create_tables_sqlite(engine):
    """Create tables for SQLite testing.

    NOTE: The PostgreSQL schema uses native enum types created by the
    migration. This manual schema mirrors it with plain TEXT columns.

    IMPORTANT: When adding new columns to models, you MUST also add them here
    to keep the test schema in sync.
    """
    with engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys=OFF"))

        # Options (no deps)
        conn.execute(
            text(
                """
            CREATE TABLE IF NOT EXISTS options (
                key TEXT PRIMARY KEY,
                value TEXT,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP NOT NULL,
                updated_at DATETIME
            )
        """
            )
        )

        # Content items (no deps)
        conn.execute(
            text(
                """
            CREATE TABLE IF NOT EXISTS content_items (
                id TEXT PRIMARY KEY,
                item_type TEXT NOT NULL,
                title TEXT NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP NOT NULL,
                updated_at DATETIME
            )
        """
            )
        )

        # Media attachments (no deps)
        conn.execute(
            text(
                """
            CREATE TABLE IF NOT EXISTS media_attachments (
                id TEXT PRIMARY KEY,
                owner_subject_id TEXT,
                filename TEXT NOT NULL,
                original_filename TEXT NOT NULL,
                content_type TEXT NOT NULL,
                size_bytes INTEGER NOT NULL,
                subdir TEXT NOT NULL,
                storage_path TEXT NOT NULL,
                renditions TEXT NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP NOT NULL
            )
        """
            )
        )

        # Reviews (deps: content_items)
        conn.execute(
            text(
                """
            CREATE TABLE IF NOT EXISTS reviews (
                id TEXT PRIMARY KEY,
                subject_id TEXT NOT NULL REFERENCES content_items(id) ON DELETE CASCADE,
                author_id TEXT,
                author_name TEXT NOT NULL,
                author_email TEXT,
                author_url TEXT,
                rating INTEGER NOT NULL,
                content TEXT NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP NOT NULL
            )
        """
            )
        )

        # Review image attachments (deps: reviews)
        conn.execute(
            text(
                """
            CREATE TABLE IF NOT EXISTS review_image_attachments (
                id TEXT PRIMARY KEY,
                review_id TEXT UNIQUE NOT NULL REFERENCES reviews(id) ON DELETE CASCADE,
                attachment_ids TEXT NOT NULL,
                approval_status TEXT NOT NULL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP NOT NULL,
                updated_at DATETIME
            )
        """
            )
        )

        conn.execute(text("PRAGMA foreign_keys=ON"))
        conn.commit()


@pytest.fixture(scope="function")
def engine():
    """Create a SQLite in-memory engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    _create_tables_sqlite(engine)

    yield engine


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    TestingSessionLocal = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with overridden session dependency."""

    def override_get_db():
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


# ============================================================================
# Media Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """Point the media store at a temporary uploads directory."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "uploads_base_path", path)
    return path


@pytest.fixture
def media(session: Session, uploads_dir) -> MediaStore:
    return MediaStore(session, base_path=uploads_dir)


def make_image_bytes(image_format: str = "JPEG", size: tuple[int, int] = (64, 64)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(80, 112, 255)).save(buffer, format=image_format)
    return buffer.getvalue()


def make_descriptor(
    name: str = "photo.jpg",
    data: bytes | None = None,
    mime_type: str = "image/jpeg",
    size: int | None = None,
    transport_error: TransportError = TransportError.OK,
) -> FileDescriptor:
    """Build a file descriptor. ``size`` overrides the reported size without changing the content."""
    if data is None:
        data = make_image_bytes()
    return FileDescriptor(
        name=name,
        declared_mime_type=mime_type,
        temp_file=io.BytesIO(data),
        transport_error=transport_error,
        size=len(data) if size is None else size,
    )


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def images_enabled() -> ReviewSettings:
    """Settings accepting images from everyone, with moderation."""
    return ReviewSettings(allow_images=True, allow_images_guests=True, require_image_approval=True)


@pytest.fixture
def stored_settings(session: Session, images_enabled: ReviewSettings) -> ReviewSettings:
    save_review_settings(session, images_enabled)
    return images_enabled


@pytest.fixture
def product(session: Session) -> ContentItem:
    product = ContentItem(item_type=ContentItemType.PRODUCT, title="Merino Sweater")
    session.add(product)
    session.flush()
    return product


@pytest.fixture
def page(session: Session) -> ContentItem:
    page = ContentItem(item_type=ContentItemType.PAGE, title="About us")
    session.add(page)
    session.flush()
    return page


def make_review(
    session: Session,
    subject_id: UUID,
    author_id: UUID | None = None,
    created_at: datetime | None = None,
    content: str = "Lovely and warm.",
) -> Review:
    review = Review(
        subject_id=subject_id,
        author_id=author_id,
        author_name="Jana",
        author_email="jana@example.com",
        rating=5,
        content=content,
    )
    if created_at is not None:
        review.created_at = created_at
    session.add(review)
    session.flush()
    return review


@pytest.fixture
def review(session: Session, product: ContentItem) -> Review:
    return make_review(session, product.id)
