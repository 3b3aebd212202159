"""Tests for memory storage backend."""

import sqlite3

import pytest

from vitalis.memory.schema import MessageRole
from vitalis.memory.storage import MemoryStorage, StorageError


def test_initialize_db(storage):
    """Test database initialization creates the file and tables."""
    assert storage.db_path.exists()

    with sqlite3.connect(storage.db_path) as conn:
        tables = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
    assert {"users", "messages", "facts"} <= tables


def test_initialize_is_idempotent(tmp_path):
    db_path = tmp_path / "memory.db"
    first = MemoryStorage(db_path)
    user = first.create_user()

    second = MemoryStorage(db_path)
    assert second.get_user(user.id) is not None


def test_creates_parent_directories(tmp_path):
    storage = MemoryStorage(tmp_path / "a" / "b" / "memory.db")
    assert storage.db_path.parent.is_dir()


def test_create_user(storage):
    user = storage.create_user()

    assert user.id
    assert user.created_at is not None
    assert storage.get_user(user.id) == user


def test_create_user_ids_are_unique(storage):
    ids = {storage.create_user().id for _ in range(10)}
    assert len(ids) == 10


def test_get_nonexistent_user(storage):
    assert storage.get_user("nonexistent") is None


def test_append_message(storage, user_id):
    message = storage.append_message(user_id, MessageRole.USER, "I have a headache")

    assert message.id is not None
    assert message.user_id == user_id
    assert message.role == MessageRole.USER
    assert storage.count_messages(user_id) == 1


def test_append_message_accepts_plain_role_string(storage, user_id):
    message = storage.append_message(user_id, "assistant", "Rest and hydrate.")
    assert message.role == MessageRole.ASSISTANT


def test_append_message_rejects_unknown_role(storage, user_id):
    with pytest.raises(StorageError, match="Unknown message role"):
        storage.append_message(user_id, "system", "not allowed")
    assert storage.count_messages(user_id) == 0


def _reject_assistant_turns(storage: MemoryStorage) -> None:
    """Make every assistant insert fail, as a full disk would."""
    with sqlite3.connect(storage.db_path) as conn:
        conn.execute(
            """
            CREATE TRIGGER reject_assistant BEFORE INSERT ON messages
            WHEN NEW.role = 'assistant'
            BEGIN SELECT RAISE(ABORT, 'database or disk is full'); END
        """
        )


def test_append_exchange_stores_both_turns_in_order(storage, user_id):
    question, reply = storage.append_exchange(user_id, "I have a rash", "Keep it dry.")

    assert question.role == MessageRole.USER
    assert reply.role == MessageRole.ASSISTANT
    assert question.id < reply.id
    history = storage.list_recent_messages(user_id, limit=10)
    assert [m.content for m in history] == ["Keep it dry.", "I have a rash"]


def test_append_exchange_is_atomic(storage, user_id):
    _reject_assistant_turns(storage)

    with pytest.raises(StorageError, match="disk is full"):
        storage.append_exchange(user_id, "I have a rash", "Keep it dry.")

    assert storage.count_messages(user_id) == 0


def test_append_message_unknown_user_raises(storage):
    """Foreign key constraints are enforced."""
    with pytest.raises(StorageError):
        storage.append_message("ghost", MessageRole.USER, "Hello")


def test_list_recent_messages_newest_first(storage, user_id):
    for i in range(8):
        storage.append_message(user_id, MessageRole.USER, f"message {i}")

    recent = storage.list_recent_messages(user_id, limit=5)

    assert [m.content for m in recent] == [
        "message 7",
        "message 6",
        "message 5",
        "message 4",
        "message 3",
    ]


def test_list_recent_messages_is_per_user(storage, user_id):
    other = storage.create_user().id
    storage.append_message(user_id, MessageRole.USER, "mine")
    storage.append_message(other, MessageRole.USER, "theirs")

    assert [m.content for m in storage.list_recent_messages(user_id, limit=5)] == ["mine"]


def test_list_recent_messages_empty(storage, user_id):
    assert storage.list_recent_messages(user_id, limit=5) == []


def test_append_and_list_facts(storage, user_id):
    storage.append_fact(user_id, "User is vegan")
    storage.append_fact(user_id, "User lives in Delhi")

    facts = storage.list_facts(user_id)

    assert [f.content for f in facts] == ["User is vegan", "User lives in Delhi"]
    assert all(f.id is not None for f in facts)
    assert all(f.user_id == user_id for f in facts)


def test_facts_are_append_only(storage, user_id):
    """Duplicate facts are kept, not merged."""
    storage.append_fact(user_id, "User is vegan")
    storage.append_fact(user_id, "User is vegan")

    assert len(storage.list_facts(user_id)) == 2


def test_list_facts_unknown_user_is_empty(storage):
    assert storage.list_facts("nobody") == []


def test_append_fact_unknown_user_raises(storage):
    with pytest.raises(StorageError):
        storage.append_fact("ghost", "User is vegan")


def test_unreachable_database_raises_storage_error(tmp_path):
    storage = MemoryStorage(tmp_path / "memory.db")
    storage.db_path = tmp_path / "missing-dir" / "memory.db"

    with pytest.raises(StorageError):
        storage.list_facts("anyone")
