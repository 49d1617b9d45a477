"""
Pytest configuration and fixtures for ThreadKeep tests.

This module provides shared fixtures for testing database models, repositories,
the sync service and the API.
"""

import os

# Keep the application engine off PostgreSQL unless a test run asks for it
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import uuid
from datetime import UTC, datetime, timedelta
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from threadkeep.models.db import Base, Conversation, File, Message

OWNER_ID = "device-" + "a" * 32
OTHER_OWNER_ID = "device-" + "b" * 32


def auth_header(owner_id: str = OWNER_ID) -> dict[str, str]:
    """Bearer header for an anonymous device owner."""
    return {"Authorization": f"Bearer anon_{owner_id}"}


@pytest.fixture(scope="session")
def test_engine():
    """Create a test database engine using SQLite in-memory."""
    from sqlalchemy import JSON, event
    from sqlalchemy.dialects import postgresql

    # Replace JSONB with JSON for SQLite
    @event.listens_for(Base.metadata, "before_create")
    def _set_json_type(target, connection, **kw):
        for table in target.tables.values():
            for column in table.columns:
                if isinstance(column.type, postgresql.JSONB):
                    column.type = JSON()

    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={
            "check_same_thread": False
        },  # Allow cross-thread access for TestClient
    )

    # pysqlite manages BEGIN itself and breaks SAVEPOINT; take it over
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """
    Create a new database session for a test.

    Each test gets a fresh session with a transaction that is rolled back
    after the test completes, ensuring test isolation. Session commits only
    release savepoints inside that outer transaction.
    """
    connection = test_engine.connect()
    transaction = connection.begin()
    session = sessionmaker(bind=connection, join_transaction_mode="create_savepoint")()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def api_client(db_session: Session):
    """Create a test client for FastAPI with database dependency override."""
    from unittest.mock import patch

    from fastapi.testclient import TestClient

    from threadkeep.api.app import app
    from threadkeep.db.connection import get_db

    # Override the get_db dependency to use test database
    def override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    # Disable lifespan startup checks for testing
    with patch("threadkeep.api.app.run_all_startup_checks"):
        client = TestClient(app)
        yield client

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id() -> str:
    """Identity of the default test owner (an anonymous device)."""
    return OWNER_ID


@pytest.fixture
def other_owner_id() -> str:
    return OTHER_OWNER_ID


@pytest.fixture
def owner_headers() -> dict[str, str]:
    """Authorization header for the default test owner."""
    return auth_header(OWNER_ID)


@pytest.fixture
def other_owner_headers() -> dict[str, str]:
    """Authorization header for a second, unrelated owner."""
    return auth_header(OTHER_OWNER_ID)


@pytest.fixture
def sample_conversation(db_session: Session) -> Conversation:
    """Create a sample conversation owned by the default test owner."""
    now = datetime.now(UTC)
    conversation = Conversation(
        id=uuid.uuid4(),
        user_id=OWNER_ID,
        platform="chatgpt",
        platform_url="https://chat.openai.com/c/abc",
        title="Sorting a list in Python",
        message_count=2,
        code_block_count=1,
        first_message_at=now - timedelta(minutes=5),
        last_message_at=now,
        extra_data={"project": "scratch", "tags": ["python"], "syncedAt": now.isoformat()},
        updated_at=now,
    )
    db_session.add(conversation)
    db_session.commit()
    db_session.refresh(conversation)
    return conversation


@pytest.fixture
def sample_messages(
    db_session: Session, sample_conversation: Conversation
) -> list[Message]:
    """Create two messages for the sample conversation."""
    messages = [
        Message(
            id=uuid.uuid4(),
            conversation_id=sample_conversation.id,
            user_id=OWNER_ID,
            sender="user",
            content="How do I sort a list?",
            has_code=False,
            code_blocks=[],
            message_index=0,
        ),
        Message(
            id=uuid.uuid4(),
            conversation_id=sample_conversation.id,
            user_id=OWNER_ID,
            sender="assistant",
            content="Use sorted:\n```python\nsorted(items)\n```",
            has_code=True,
            code_blocks=["```python\nsorted(items)\n```"],
            message_index=1,
        ),
    ]
    db_session.add_all(messages)
    db_session.commit()
    return messages


@pytest.fixture
def sample_file(db_session: Session, sample_conversation: Conversation) -> File:
    """Create a file attached to the sample conversation."""
    file = File(
        id=uuid.uuid4(),
        user_id=OWNER_ID,
        conversation_id=sample_conversation.id,
        filename="data.csv",
        file_type="text/csv",
        file_size=2048,
        source_url="https://files.example.com/data.csv",
        platform="chatgpt",
        extra_data={},
    )
    db_session.add(file)
    db_session.commit()
    db_session.refresh(file)
    return file


@pytest.fixture
def other_owner_conversation(db_session: Session) -> Conversation:
    """Create a conversation that belongs to a different owner."""
    now = datetime.now(UTC)
    conversation = Conversation(
        id=uuid.uuid4(),
        user_id=OTHER_OWNER_ID,
        platform="claude",
        title="Someone else's chat",
        message_count=0,
        code_block_count=3,
        first_message_at=now,
        last_message_at=now,
        extra_data={},
        updated_at=now,
    )
    db_session.add(conversation)
    db_session.commit()
    db_session.refresh(conversation)
    return conversation


@pytest.fixture
def insert_conversation_row(db_session: Session):
    """
    Insert a conversation with a plain INSERT, as a concurrent writer would.

    Returns a function taking (conversation_id, user_id, title).
    """
    from sqlalchemy import insert

    def _insert(conversation_id: uuid.UUID, user_id: str, title: str) -> None:
        now = datetime.now(UTC)
        db_session.execute(
            insert(Conversation.__table__).values(
                {
                    "id": conversation_id,
                    "user_id": user_id,
                    "platform": "chatgpt",
                    "title": title,
                    "message_count": 0,
                    "code_block_count": 0,
                    "first_message_at": now,
                    "last_message_at": now,
                    "metadata": {},
                    "updated_at": now,
                }
            )
        )

    return _insert
