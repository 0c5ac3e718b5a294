"""Action-related API endpoints."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from agora.core.modules.action.models import Action, ActionTiming
from agora.web.deps import AppDep
from agora.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["actions"])


class AppendActionRequest(BaseModel):
    """Request to post a question or comment."""

    type: str = Field(..., description="Action kind: 'question' or 'comment'")
    content: str = Field(..., description="The question or comment text")
    action_id: int = Field(..., description="Client-side action number, a positive integer")

    model_config = {"json_schema_extra": {"examples": [{"type": "question", "content": "What is X?", "action_id": 1}]}}


class AppendActionResponse(BaseModel):
    action: Action


class ReplaceActionsRequest(BaseModel):
    """Request to replace a session's action list wholesale."""

    actions: list[dict[str, Any]] = Field(
        ..., description="Complete desired action list; each item needs id, action_id, type, and content"
    )


class ActionContentResponse(BaseModel):
    content: str | None


@router.post(
    "/sessions/{code}/actions",
    summary="Append action",
    description="Append a question or comment to the end of the session's action list.",
    operation_id="appendAction",
    status_code=201,
    responses={
        201: {"description": "Action created"},
        400: {"model": ErrorResponse, "description": "Invalid type, content, or action_id, or the session has ended"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Session changed concurrently"},
    },
)
async def append_action(code: str, req: AppendActionRequest, app: AppDep) -> AppendActionResponse:
    action = await app.append_action(code, req.type, req.content, req.action_id)
    return AppendActionResponse(action=action)


@router.put(
    "/sessions/{code}/actions",
    summary="Replace actions",
    description="Replace the session's whole action list, e.g. to delete actions.",
    operation_id="replaceActions",
    responses={
        200: {"description": "Persisted action list"},
        400: {"model": ErrorResponse, "description": "An action is missing required fields"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Session changed concurrently"},
    },
)
async def replace_actions(code: str, req: ReplaceActionsRequest, app: AppDep) -> list[Action]:
    return await app.replace_actions(code, req.actions)


@router.get(
    "/sessions/{code}/actions/times",
    summary="Get action times",
    description="Get every action with the seconds elapsed since it was posted, as of the last recomputation.",
    operation_id="getActionTimes",
    responses={
        200: {"description": "Actions with time margins"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_action_times(code: str, app: AppDep) -> list[ActionTiming]:
    return await app.get_actions_with_margins(code)


@router.get(
    "/sessions/{code}/actions/{action_id}",
    summary="Get action content",
    description="Get the content of the first action with the given action_id.",
    operation_id="getActionContent",
    responses={
        200: {"description": "Action content"},
        404: {"model": ErrorResponse, "description": "Session or action not found"},
    },
)
async def get_action_content(code: str, action_id: int, app: AppDep) -> ActionContentResponse:
    return ActionContentResponse(content=await app.get_action_content(code, action_id))
