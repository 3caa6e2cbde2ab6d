"""Session Repository interface."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from ..entities.practice_session import PracticeSession


@runtime_checkable
class SessionRepository(Protocol):
    """Protocol defining the interface for practice session repositories.

    A session is stored together with all of its answer slots, so every
    write of a session is a single atomic record write. Implementations
    exist for in-memory and DynamoDB storage.
    """

    async def save_session(self, session: PracticeSession) -> None:
        """Save a new session to the repository.

        Args:
            session: The session entity to save, including its answers.
        """
        ...

    async def get_session(self, session_id: UUID) -> PracticeSession:
        """Retrieve a session by ID from the repository.

        Args:
            session_id: The unique identifier of the session.

        Returns:
            PracticeSession: The session entity with its answers.

        Raises:
            SessionNotFoundError: If the session is not found.
        """
        ...

    async def update_session(self, session: PracticeSession) -> None:
        """Update an existing session in the repository.

        Args:
            session: The session entity to update.

        Raises:
            SessionNotFoundError: If the session is not found.
        """
        ...

    async def list_sessions(self, caller_id: str) -> list[PracticeSession]:
        """List every session owned by a caller, newest first.

        Args:
            caller_id: The owning caller.
        """
        ...
