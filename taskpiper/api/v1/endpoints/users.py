"""User API: thin routes delegating to UserService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from taskpiper.api.v1.dependencies import get_user_service
from taskpiper.application.use_cases.users import UserService
from taskpiper.schemas.common import ApiResponse
from taskpiper.schemas.user import UserBody

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_users(
    request: Request,
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """List users (where, sort, select|filter, skip, limit) or count them (count=true)."""
    data = await user_svc.list_users(request.query_params)
    return ApiResponse(message="OK", data=data)


@router.post("", response_model=ApiResponse, status_code=201)
async def create_user(
    user_svc: Annotated[UserService, Depends(get_user_service)],
    body: UserBody | None = None,
):
    """Create a user; tasks in pendingTasks are assigned to it."""
    created = await user_svc.create_user(body.to_payload() if body else {})
    return ApiResponse(message="User created", data=created.to_document())


@router.get("/{user_id}", response_model=ApiResponse)
async def get_user(
    request: Request,
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    data = await user_svc.get_user(user_id, request.query_params)
    return ApiResponse(message="OK", data=data)


@router.put("/{user_id}", response_model=ApiResponse)
async def replace_user(
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
    body: UserBody | None = None,
):
    """Full replace of name, email and pendingTasks; tasks are reassigned to match."""
    updated = await user_svc.replace_user(user_id, body.to_payload() if body else {})
    return ApiResponse(message="User updated", data=updated.to_document())


@router.delete("/{user_id}", status_code=204, response_class=Response)
async def delete_user(
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
) -> Response:
    """Delete a user; its pending tasks become unassigned."""
    await user_svc.delete_user(user_id)
    return Response(status_code=204)
