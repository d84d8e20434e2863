# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-memberhub")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from memberhub.core.security import create_access_token
from memberhub.db.session import Base, create_tables, drop_tables, enable_sqlite_foreign_keys
from memberhub.db.session import get_db as app_get_session
from memberhub.main import app as fastapi_app
from memberhub.models import Category, Chapter, ChapterMember, Member, Resource
from memberhub.models.member import ROLE_ADMIN, ROLE_MODERATOR
from memberhub.services.capabilities import Actor

TEST_DB_URL = "sqlite://"

_EMAIL_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def make_member(
    db_session: Session,
    name: str,
    *,
    role: str = "user",
    industry: str | None = None,
    company: str | None = None,
    title: str | None = None,
    chapter: Chapter | None = None,
) -> Member:
    """Persist a member, enrolling them in ``chapter`` when given."""
    member = Member(
        name=name,
        email=f"member{next(_EMAIL_COUNTER)}@example.com",
        role=role,
        industry=industry,
        company=company,
        title=title,
        chapter_id=chapter.id if chapter is not None else None,
    )
    db_session.add(member)
    db_session.flush()
    if chapter is not None:
        db_session.add(ChapterMember(chapter_id=chapter.id, member_id=member.id))
        db_session.flush()
    db_session.refresh(member)
    return member


def bearer(member: Member) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(member.id)}"}


@pytest.fixture()
def chapter(db_session: Session) -> Iterator[Chapter]:
    """Create a chapter that member fixtures belong to."""
    chapter = Chapter(name="Lisbon Chapter", city="Lisbon", country="Portugal")
    db_session.add(chapter)
    db_session.flush()
    db_session.refresh(chapter)
    yield chapter


@pytest.fixture()
def alice(db_session: Session, chapter: Chapter) -> Member:
    return make_member(
        db_session,
        "Alice Almeida",
        industry="Finance",
        company="Atlantic Capital",
        title="Partner",
        chapter=chapter,
    )


@pytest.fixture()
def bob(db_session: Session, chapter: Chapter) -> Member:
    return make_member(
        db_session,
        "Bob Barros",
        industry="Technology",
        company="Byte Works",
        title="CTO",
        chapter=chapter,
    )


@pytest.fixture()
def carol(db_session: Session) -> Member:
    return make_member(
        db_session,
        "Carol Costa",
        industry="Finance",
        company="Costa Advisory",
        title="Founder",
    )


@pytest.fixture()
def admin(db_session: Session) -> Member:
    return make_member(db_session, "Ada Admin", role=ROLE_ADMIN)


@pytest.fixture()
def moderator(db_session: Session) -> Member:
    return make_member(db_session, "Mo Moderator", role=ROLE_MODERATOR)


@pytest.fixture()
def alice_actor(alice: Member) -> Actor:
    return Actor.for_member(alice)


@pytest.fixture()
def bob_actor(bob: Member) -> Actor:
    return Actor.for_member(bob)


@pytest.fixture()
def admin_actor(admin: Member) -> Actor:
    return Actor.for_member(admin)


@pytest.fixture()
def moderator_actor(moderator: Member) -> Actor:
    return Actor.for_member(moderator)


@pytest.fixture()
def alice_headers(alice: Member) -> dict[str, str]:
    """Return authorization headers for Alice."""
    return bearer(alice)


@pytest.fixture()
def bob_headers(bob: Member) -> dict[str, str]:
    """Return authorization headers for Bob."""
    return bearer(bob)


@pytest.fixture()
def admin_headers(admin: Member) -> dict[str, str]:
    return bearer(admin)


@pytest.fixture()
def general_category(db_session: Session) -> Iterator[Category]:
    """Create an empty "General" forum category."""
    category = Category(name="General", slug="general", order=1)
    db_session.add(category)
    db_session.flush()
    db_session.refresh(category)
    yield category


@pytest.fixture()
def resource(db_session: Session) -> Iterator[Resource]:
    """Create a library resource with no engagement."""
    resource = Resource(
        title="Negotiating Term Sheets",
        description="A practical guide to venture term sheets.",
        content="Valuation, liquidation preferences and board seats.",
        category="Finance",
        resource_type="guide",
        level="intermediate",
        tags=["venture", "legal"],
    )
    db_session.add(resource)
    db_session.flush()
    db_session.refresh(resource)
    yield resource
