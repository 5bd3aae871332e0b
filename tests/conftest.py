# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from agora_stage.db.session import Base, SessionFactory
from agora_stage.db.session import get_db as app_get_session
from agora_stage.main import app as fastapi_app
from agora_stage.models import Community, Notification, Post, User
from agora_stage.services.comment_service import CommentService
from agora_stage.services.dispatch import InlineDispatcher
from agora_stage.services.draft_service import DraftService
from agora_stage.services.email import EmailError, EmailMessage
from agora_stage.services.fanout import NotificationFanout
from agora_stage.services.notification_service import NotificationService
from agora_stage.services.post_service import PostService
from agora_stage.services.version_service import VersionService

TEST_DB_URL = "sqlite://"

POST_CONTENT = "<p>How do I configure the community settings page?</p>"


class RecordingEmailSender:
    """Email transport double that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []
        self.error: Exception | None = None

    def send_notification(self, message: EmailMessage) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(message)

    def fail_with(self, error: Exception | None = None) -> None:
        self.error = error or EmailError("mail server unavailable")


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # commit()/rollback() inside the code under test only release or roll back
    # a SAVEPOINT; the outer transaction is discarded after the test.
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


@pytest.fixture()
def session_factory(db_session: Session) -> SessionFactory:
    """Hand the detached fan-out phase the test session without closing it."""

    @contextmanager
    def _session_scope() -> Iterator[Session]:
        yield db_session

    return _session_scope


@pytest.fixture()
def id_factory() -> Callable[[], str]:
    counter = count(1)
    return lambda: f"id-{next(counter):04d}"


@pytest.fixture()
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture()
def dispatcher() -> InlineDispatcher:
    return InlineDispatcher()


@pytest.fixture()
def fanout(
    session_factory: SessionFactory,
    email_sender: RecordingEmailSender,
    dispatcher: InlineDispatcher,
    id_factory: Callable[[], str],
) -> NotificationFanout:
    return NotificationFanout(
        session_factory,
        email_sender=email_sender,
        dispatcher=dispatcher,
        id_factory=id_factory,
    )


@pytest.fixture()
def post_service(
    db_session: Session, fanout: NotificationFanout, id_factory: Callable[[], str]
) -> PostService:
    return PostService(db_session, fanout=fanout, id_factory=id_factory)


@pytest.fixture()
def comment_service(
    db_session: Session, fanout: NotificationFanout, id_factory: Callable[[], str]
) -> CommentService:
    return CommentService(db_session, fanout=fanout, id_factory=id_factory)


@pytest.fixture()
def draft_service(db_session: Session, id_factory: Callable[[], str]) -> DraftService:
    return DraftService(db_session, id_factory=id_factory)


@pytest.fixture()
def version_service(db_session: Session, id_factory: Callable[[], str]) -> VersionService:
    return VersionService(db_session, id_factory=id_factory)


@pytest.fixture()
def notification_service(
    db_session: Session,
    email_sender: RecordingEmailSender,
    dispatcher: InlineDispatcher,
    id_factory: Callable[[], str],
) -> NotificationService:
    return NotificationService(
        db_session,
        email_sender=email_sender,
        dispatcher=dispatcher,
        id_factory=id_factory,
    )


@pytest.fixture()
def users(db_session: Session) -> dict[str, User]:
    """Persist three members: u1 (Alice), u2 (Bob) and u3 (Carol)."""
    created = {
        user_id: User(id=user_id, email=f"{user_id}@example.com", display_name=name)
        for user_id, name in (("u1", "Alice"), ("u2", "Bob"), ("u3", "Carol"))
    }
    db_session.add_all(created.values())
    db_session.commit()
    return created


@pytest.fixture()
def community(db_session: Session) -> Community:
    community = Community(id="c1", slug="makers", display_name="Makers")
    db_session.add(community)
    db_session.commit()
    return community


@pytest.fixture()
def make_post(db_session: Session, community: Community) -> Callable[..., Post]:
    """Persist a post directly, bypassing the service and its fan-out."""
    counter = count(1)

    def _make(author_id: str = "u3", *, published: bool = True, **overrides) -> Post:
        post = Post.create(
            id=overrides.pop("id", f"post-{next(counter)}"),
            community_id=community.id,
            author_id=author_id,
            title=overrides.pop("title", "Help with settings"),
            content=overrides.pop("content", POST_CONTENT),
        )
        if published:
            post.publish()
        db_session.add(post)
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def post(users: dict[str, User], make_post: Callable[..., Post]) -> Post:
    """A published post authored by u3."""
    return make_post("u3")


@pytest.fixture()
def notifications_for(db_session: Session) -> Callable[[str], list[Notification]]:
    """Return a lookup of every notification a user has received, oldest first."""

    def _lookup(user_id: str) -> list[Notification]:
        return (
            db_session.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at, Notification.id)
            .all()
        )

    return _lookup


@pytest.fixture()
def all_notifications(db_session: Session) -> Callable[[], list[Notification]]:
    return lambda: (
        db_session.query(Notification).order_by(Notification.created_at, Notification.id).all()
    )


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, db_session: Session) -> Iterator[TestClient]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(app_get_session, None)
