"""Session-related API endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from agora.core.modules.session.models import Session, SessionMode, SessionOverview
from agora.web.deps import AppDep
from agora.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["sessions"])


class CreateSessionRequest(BaseModel):
    """Request to create a new session."""

    title: str = Field(..., description="Session title, at least 3 characters after trimming")
    description: str | None = Field(None, description="Optional description, at most 200 characters")
    mode: str = Field(..., description=f"Presentation mode, one of: {', '.join(m.value for m in SessionMode)}")

    model_config = {
        "json_schema_extra": {
            "examples": [{"title": "Weekly all-hands", "description": "Questions for the leadership team", "mode": "normal"}]
        }
    }


@router.post(
    "/sessions",
    summary="Create session",
    description="Create a new session with a unique six-character code and no actions.",
    operation_id="createSession",
    status_code=201,
    responses={
        201: {"description": "Session created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid title, description, or mode"},
        503: {"model": ErrorResponse, "description": "No unique code could be allocated"},
    },
)
async def create_session(req: CreateSessionRequest, app: AppDep) -> Session:
    return await app.create_session(req.title, req.description, req.mode)


@router.get(
    "/sessions",
    summary="List sessions",
    description="Get all sessions with the time passed since each was started.",
    operation_id="listSessions",
)
async def list_sessions(app: AppDep) -> list[SessionOverview]:
    return await app.list_sessions()


@router.get(
    "/sessions/{code}",
    summary="Get session",
    description="Get a session and its actions by code.",
    operation_id="getSession",
    responses={
        200: {"description": "Session details"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(code: str, app: AppDep) -> Session:
    return await app.get_session(code)


@router.post(
    "/sessions/{code}/end",
    summary="End session",
    description="Close a session. Its actions are frozen and no longer recomputed.",
    operation_id="endSession",
    responses={
        200: {"description": "Session ended"},
        400: {"model": ErrorResponse, "description": "Session has already ended"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def end_session(code: str, app: AppDep) -> Session:
    return await app.end_session(code)
