"""Owner-checked session loading shared by the session services."""

import logging
from uuid import UUID

from ..entities.practice_session import PracticeSession
from ..errors import AuthenticationError, SessionNotFoundError
from ..interfaces.session_repository import SessionRepository

logger = logging.getLogger(__name__)


def require_caller(caller_id: str) -> str:
    if not caller_id or not str(caller_id).strip():
        raise AuthenticationError("User is not authenticated.")
    return caller_id


async def load_owned_session(
    session_repository: SessionRepository,
    session_id: UUID,
    caller_id: str,
) -> PracticeSession:
    """Load a session, hiding sessions owned by other callers.

    Raises:
        SessionNotFoundError: If the session does not exist or belongs to someone else.
    """
    require_caller(caller_id)
    session = await session_repository.get_session(session_id)
    if session.caller_id != caller_id:
        logger.warning(f"Caller {caller_id} attempted to access session {session_id} owned by another caller")
        raise SessionNotFoundError(session_id)
    return session
