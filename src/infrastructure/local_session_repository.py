"""Local in-memory implementation of Session Repository."""

from typing import Dict
from uuid import UUID

from ..domain.entities.practice_session import PracticeSession
from ..domain.errors import ConcurrentModificationError, SessionNotFoundError
from ..domain.interfaces.session_repository import SessionRepository


class LocalSessionRepository(SessionRepository):
    """Local in-memory implementation of the Session Repository.

    Stores deep copies of sessions in a dictionary for testing and
    development purposes, so callers never share state with the store.
    """

    def __init__(self):
        """Initialize the local session repository with an empty dictionary."""
        self._sessions: Dict[UUID, PracticeSession] = {}

    async def save_session(self, session: PracticeSession) -> None:
        """Save a session to the in-memory dictionary.

        Args:
            session: The session aggregate to save.
        """
        self._sessions[session.id] = session.model_copy(deep=True)

    async def get_session(self, session_id: UUID) -> PracticeSession:
        """Retrieve a session by ID from the in-memory dictionary.

        Args:
            session_id: The unique identifier of the session.

        Returns:
            PracticeSession: A copy of the stored session.

        Raises:
            SessionNotFoundError: If the session is not found.
        """
        if session_id not in self._sessions:
            raise SessionNotFoundError(session_id)

        return self._sessions[session_id].model_copy(deep=True)

    async def update_session(self, session: PracticeSession) -> None:
        """Replace an existing session in the in-memory dictionary.

        The write is accepted only if the stored version still matches
        ``session.version``; on success the version is bumped on both copies.

        Raises:
            SessionNotFoundError: If the session is not found.
            ConcurrentModificationError: If the stored session has moved on.
        """
        stored = self._sessions.get(session.id)
        if stored is None:
            raise SessionNotFoundError(session.id)
        if stored.version != session.version:
            raise ConcurrentModificationError(session.id)

        session.version += 1
        self._sessions[session.id] = session.model_copy(deep=True)

    async def list_sessions(self, caller_id: str) -> list[PracticeSession]:
        """List a caller's sessions, newest first."""
        sessions = [
            session.model_copy(deep=True)
            for session in self._sessions.values()
            if session.caller_id == caller_id
        ]
        return sorted(sessions, key=lambda session: session.started_at, reverse=True)

    def clear(self) -> None:
        """Clear all sessions from the dictionary."""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
