"""In-memory stores keyed by session ID / task ID.

Both stores are process-lifetime only: a restart drops in-flight uploads and
conversations. They sit behind small key-value protocols so a TTL-backed
external cache can replace them without touching the orchestrators.
"""

from typing import Protocol

from models import ConversationSession, ConversationTurn, TaskRecord


class SessionStore(Protocol):
    def get(self, session_id: str) -> ConversationSession | None: ...

    def append(self, session_id: str, *turns: ConversationTurn) -> ConversationSession: ...


class TaskStore(Protocol):
    def put(self, record: TaskRecord) -> None: ...

    def get(self, task_id: str) -> TaskRecord | None: ...

    def discard(self, task_id: str) -> None: ...


class InMemorySessionStore:
    """Dict-backed SessionStore. No locking: concurrent turns on one key are last-writer-wins."""

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}

    def get(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    def append(self, session_id: str, *turns: ConversationTurn) -> ConversationSession:
        session = self._sessions.setdefault(session_id, ConversationSession(session_id=session_id))
        session.turns.extend(turns)
        return session

    def clear(self) -> None:
        self._sessions.clear()

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


class InMemoryTaskStore:
    def __init__(self) -> None:
        self._tasks: dict[str, TaskRecord] = {}

    def put(self, record: TaskRecord) -> None:
        self._tasks[record.task_id] = record

    def get(self, task_id: str) -> TaskRecord | None:
        return self._tasks.get(task_id)

    def discard(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)

    def clear(self) -> None:
        self._tasks.clear()

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks


conversation_sessions = InMemorySessionStore()
upload_tasks = InMemoryTaskStore()
