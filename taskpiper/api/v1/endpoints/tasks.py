"""Task API: thin routes delegating to TaskService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from taskpiper.api.v1.dependencies import get_task_service
from taskpiper.application.use_cases.tasks import TaskService
from taskpiper.schemas.common import ApiResponse
from taskpiper.schemas.task import TaskBody

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_tasks(
    request: Request,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    """List tasks (where, sort, select, skip, limit) or count them (count=true)."""
    data = await task_svc.list_tasks(request.query_params)
    return ApiResponse(message="OK", data=data)


@router.post("", response_model=ApiResponse, status_code=201)
async def create_task(
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    body: TaskBody | None = None,
):
    created = await task_svc.create_task(body.to_payload() if body else {})
    return ApiResponse(message="Task created", data=created.to_document())


@router.get("/{task_id}", response_model=ApiResponse)
async def get_task(
    request: Request,
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    """Fetch one task; optional select projection."""
    data = await task_svc.get_task(task_id, request.query_params)
    return ApiResponse(message="OK", data=data)


@router.put("/{task_id}", response_model=ApiResponse)
async def replace_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    body: TaskBody | None = None,
):
    """Full replace. 400 if the task is already completed."""
    updated = await task_svc.replace_task(task_id, body.to_payload() if body else {})
    return ApiResponse(message="Task updated", data=updated.to_document())


@router.delete("/{task_id}", status_code=204, response_class=Response)
async def delete_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
) -> Response:
    await task_svc.delete_task(task_id)
    return Response(status_code=204)
