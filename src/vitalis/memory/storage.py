"""SQLite storage backend for users, conversation turns and facts."""

import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from vitalis.memory.schema import FactRecord, MessageRecord, MessageRole, UserRecord


class StorageError(Exception):
    """Persistence unavailable or a constraint was violated."""


class MemoryStorage:
    """SQLite-based storage for users, messages and facts."""

    def __init__(self, db_path: str | Path):
        """Initialize storage with database path.

        Args:
            db_path: Path to SQLite database file (``~`` is expanded)

        Raises:
            StorageError: If the database cannot be created
        """
        self.db_path = Path(db_path).expanduser()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory: {e}") from e
        self._initialize_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection with foreign keys enforced.

        Commits on success, rolls back and raises StorageError on any
        sqlite3 error.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _initialize_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
                    content TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS facts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_user ON messages(user_id, created_at)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_facts_user ON facts(user_id)")

    def create_user(self) -> UserRecord:
        """Provision a new user with a random identifier.

        Returns:
            Created user record
        """
        user = UserRecord(id=str(uuid.uuid4()))

        with self._connect() as conn:
            conn.execute(
                "INSERT INTO users (id, created_at) VALUES (?, ?)",
                (user.id, user.created_at.isoformat()),
            )

        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        """Get a user by ID.

        Args:
            user_id: User identifier

        Returns:
            User record or None if not found
        """
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

        if not row:
            return None

        return UserRecord(id=row["id"], created_at=datetime.fromisoformat(row["created_at"]))

    def append_message(self, user_id: str, role: MessageRole | str, content: str) -> MessageRecord:
        """Store one conversation turn.

        Args:
            user_id: Owning user (must exist)
            role: ``user`` or ``assistant``
            content: Turn text

        Returns:
            Stored message with its assigned ID

        Raises:
            StorageError: On unknown role, unknown user or database failure
        """
        try:
            message_role = MessageRole(role)
        except ValueError as e:
            raise StorageError(f"Unknown message role: {role!r}") from e

        message = MessageRecord(user_id=user_id, role=message_role, content=content)

        with self._connect() as conn:
            self._insert_message(conn, message)

        return message

    def append_exchange(
        self, user_id: str, user_text: str, answer: str
    ) -> tuple[MessageRecord, MessageRecord]:
        """Store a user message and the assistant's answer atomically.

        Both rows are written in one transaction, so history never holds a
        user turn without its answer.

        Args:
            user_id: Owning user (must exist)
            user_text: What the user said
            answer: What the assistant replied

        Returns:
            Tuple of (user message, assistant message) with assigned IDs

        Raises:
            StorageError: On unknown user or database failure; nothing is stored
        """
        question = MessageRecord(user_id=user_id, role=MessageRole.USER, content=user_text)
        reply = MessageRecord(user_id=user_id, role=MessageRole.ASSISTANT, content=answer)

        with self._connect() as conn:
            self._insert_message(conn, question)
            self._insert_message(conn, reply)

        return question, reply

    @staticmethod
    def _insert_message(conn: sqlite3.Connection, message: MessageRecord) -> None:
        cursor = conn.execute(
            """
            INSERT INTO messages (user_id, role, content, created_at)
            VALUES (?, ?, ?, ?)
        """,
            (
                message.user_id,
                message.role.value,
                message.content,
                message.created_at.isoformat(),
            ),
        )
        message.id = cursor.lastrowid

    def list_recent_messages(self, user_id: str, limit: int) -> list[MessageRecord]:
        """Load the most recent turns for a user.

        Args:
            user_id: User identifier
            limit: Maximum number of messages to return

        Returns:
            Messages ordered newest first
        """
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM messages
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            """,
                (user_id, limit),
            ).fetchall()

        return [
            MessageRecord(
                id=row["id"],
                user_id=row["user_id"],
                role=MessageRole(row["role"]),
                content=row["content"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def count_messages(self, user_id: str) -> int:
        """Get the total number of stored turns for a user."""
        with self._connect() as conn:
            result = conn.execute(
                "SELECT COUNT(*) FROM messages WHERE user_id = ?", (user_id,)
            ).fetchone()
        return int(result[0])

    def append_fact(self, user_id: str, content: str) -> FactRecord:
        """Store a fact about a user.

        Facts are append-only: duplicates and contradictions are kept.

        Args:
            user_id: Owning user (must exist)
            content: Fact text, stored verbatim

        Returns:
            Stored fact with its assigned ID

        Raises:
            StorageError: On unknown user or database failure
        """
        fact = FactRecord(user_id=user_id, content=content)

        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO facts (user_id, content, created_at) VALUES (?, ?, ?)",
                (fact.user_id, fact.content, fact.created_at.isoformat()),
            )
            fact.id = cursor.lastrowid

        return fact

    def list_facts(self, user_id: str) -> list[FactRecord]:
        """Load every fact stored for a user.

        Args:
            user_id: User identifier

        Returns:
            Facts in the order they were learned (empty for unknown users)
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM facts WHERE user_id = ? ORDER BY created_at ASC, id ASC",
                (user_id,),
            ).fetchall()

        return [
            FactRecord(
                id=row["id"],
                user_id=row["user_id"],
                content=row["content"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
