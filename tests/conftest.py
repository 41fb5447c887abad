from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from newsroom.core.security import create_access_token, get_password_hash
from newsroom.db.session import get_session
from newsroom.main import create_app
from newsroom.models import Article, ArticleStatus, Category
from newsroom.services.storage import DatabaseStorage

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="storage")
def storage_fixture(session):
    return DatabaseStorage(session)


@pytest.fixture(name="client")
def client_fixture(session):
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    # Not entered as a context manager, so the lifespan never touches the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(name="admin")
def admin_fixture(storage):
    return storage.create_user("alice", get_password_hash("alice-secret"), is_admin=True)


@pytest.fixture(name="reader")
def reader_fixture(storage):
    return storage.create_user("bob", get_password_hash("bob-secret"))


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.username})}"}


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(admin):
    return bearer(admin)


@pytest.fixture(name="reader_headers")
def reader_headers_fixture(reader):
    return bearer(reader)


@pytest.fixture(name="politics")
def politics_fixture(session):
    category = Category(name="Politics", slug="politics")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture(name="make_article")
def make_article_fixture(session, admin):
    """Insert an article directly; `hours` offsets published_at from BASE_TIME."""

    def make(slug, status=ArticleStatus.PUBLISHED, hours=0, **fields):
        values = {
            "title": slug.replace("-", " ").title(),
            "excerpt": f"Excerpt for {slug}",
            "content": f"<p>Body of {slug}</p>",
            "featured": False,
            "category_id": None,
        }
        values.update(fields)
        article = Article(
            slug=slug,
            status=status,
            author_id=admin.id,
            published_at=BASE_TIME + timedelta(hours=hours),
            updated_at=BASE_TIME,
            **values,
        )
        session.add(article)
        session.commit()
        session.refresh(article)
        return article

    return make
