"""FastAPI application entry point."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain.entities import (
    ErrorCode,
    ErrorMessage,
    QuotaStatus,
    SessionSummary,
    SessionView,
    StartMockInterviewRequest,
    StartSingleQuestionRequest,
    SubmitAnswerResponse,
    SubmitMockAnswerRequest,
    SubmitSingleAnswerRequest,
)
from ..domain.errors import PracticeError
from .config import Settings, settings
from .controller import PracticeController, build_controller
from .identity import JWTIdentityProvider

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_controller(request: Request) -> PracticeController:
    return request.app.state.controller


def get_caller_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Resolve the caller id from the ``Authorization: Bearer`` header."""
    identity: JWTIdentityProvider = request.app.state.identity_provider
    return identity.resolve_caller_id(credentials.credentials if credentials else None)


async def handle_practice_error(request: Request, exc: PracticeError) -> JSONResponse:
    body = ErrorMessage(code=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    body = ErrorMessage(code=ErrorCode.INTERNAL_ERROR, message="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


def create_app(
    controller: PracticeController,
    identity_provider: JWTIdentityProvider,
    app_settings: Settings = settings,
) -> FastAPI:
    """Create the FastAPI app around an already wired controller."""
    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
    )
    app.state.controller = controller
    app.state.identity_provider = identity_provider

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PracticeError, handle_practice_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/health")
    async def health_check(controller: PracticeController = Depends(get_controller)):
        """Health check endpoint."""
        return controller.get_health_status()

    @app.post("/practice/single", response_model=SessionView)
    async def start_single_question(
        body: StartSingleQuestionRequest,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        """Start practising one question. The session completes on its one submission."""
        return await controller.start_single_question(caller_id, body.question_id)

    @app.post("/practice/sessions/{session_id}/submit-single", response_model=SubmitAnswerResponse)
    async def submit_single_answer(
        session_id: UUID,
        body: SubmitSingleAnswerRequest,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        return await controller.submit_single_answer(session_id, caller_id, body.answer)

    @app.post("/practice/mock", response_model=SessionView)
    async def start_mock_interview(
        body: StartMockInterviewRequest,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        """Start a mock interview over randomly sampled questions.

        Args:
            body: Category ids and difficulty names to filter by (empty means any),
                and the number of questions (1-10).
        """
        return await controller.start_mock_interview(caller_id, body)

    @app.post("/practice/sessions/{session_id}/submit-answer", response_model=SubmitAnswerResponse)
    async def submit_mock_answer(
        session_id: UUID,
        body: SubmitMockAnswerRequest,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        return await controller.submit_mock_answer(session_id, caller_id, body.question_id, body.answer)

    @app.post("/practice/sessions/{session_id}/complete", response_model=SessionView)
    async def complete_session(
        session_id: UUID,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        """Complete a mock interview and compute its overall score."""
        return await controller.complete_session(session_id, caller_id)

    @app.get("/practice/sessions/{session_id}", response_model=SessionView)
    async def get_session(
        session_id: UUID,
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        return await controller.get_session(session_id, caller_id)

    @app.get("/practice/history", response_model=list[SessionSummary])
    async def get_history(
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        """The caller's sessions, newest first."""
        return await controller.get_history(caller_id)

    @app.get("/practice/quota", response_model=list[QuotaStatus])
    async def get_quota(
        caller_id: str = Depends(get_caller_id),
        controller: PracticeController = Depends(get_controller),
    ):
        """Remaining daily quota per rate-limited action."""
        return await controller.get_quota_status(caller_id)

    return app


# Create FastAPI app instance
app = create_app(
    controller=build_controller(settings),
    identity_provider=JWTIdentityProvider(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        audience=settings.jwt_audience,
    ),
)
