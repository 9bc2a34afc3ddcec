from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from ..dependencies import get_logger, get_request_timeout, get_task_use_case
from ..errors import TaskRepositoryError, TaskValidationError
from ..models import Filter
from ..schemas import ErrorMessage, TaskEnvelope, TaskListEnvelope, TaskOut, decode_task
from ..usecases import TaskUseCase
from ..utils import build_response

router = APIRouter(
    prefix="/task",
    tags=["tasks"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the JSON error body shared by every task endpoint."""
    return JSONResponse(status_code=status_code, content={"message": message})


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TaskListEnvelope,
    response_model_exclude_none=True,
    summary="List Tasks",
    description=(
        "List tasks ordered by creation time.\n\n"
        "Query parameters:\n"
        "- offset: number of items to skip (default 0)\n"
        "- limit: max number of items to return (default 10)\n"
        "- sort_by: accepted, currently unused\n\n"
        "Malformed values fall back to their defaults."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        500: {"model": ErrorMessage, "description": "Storage failure"},
    },
)
def fetch_tasks(
    request: Request,
    use_case: TaskUseCase = Depends(get_task_use_case),
    logger: logging.Logger = Depends(get_logger),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    logger.info("Fetch url=%s method=%s", request.url, request.method)
    task_filter = Filter.from_query_params(request.query_params, logger)
    try:
        tasks = use_case.fetch(task_filter, timeout=timeout)
    except TaskRepositoryError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return build_response(
        [TaskOut.model_validate(t) for t in tasks.data],
        total=tasks.total,
        task_filter=task_filter,
    )


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Create Task",
    description="Create a new task. id and timestamps are assigned by the server.",
    responses={
        202: {"description": "Task created"},
        400: {"model": ErrorMessage, "description": "Invalid body or storage failure"},
    },
)
def insert_task(
    request: Request,
    body: Any = Body(None),
    use_case: TaskUseCase = Depends(get_task_use_case),
    logger: logging.Logger = Depends(get_logger),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    logger.info("Insert url=%s method=%s", request.url, request.method)
    try:
        task = decode_task(body)
    except TaskValidationError as exc:
        logger.warning("Bad request: %s", exc.message)
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)
    try:
        created = use_case.insert(task, timeout=timeout)
    except TaskRepositoryError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    return build_response(TaskOut.model_validate(created))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}/",
    response_model=TaskEnvelope,
    response_model_exclude_none=True,
    summary="Get Task",
    description="Get a single task by its UUID.",
    responses={
        200: {"description": "Task found"},
        404: {"model": ErrorMessage, "description": "Task not found or invalid id"},
    },
)
def get_task(
    task_id: str,
    request: Request,
    use_case: TaskUseCase = Depends(get_task_use_case),
    logger: logging.Logger = Depends(get_logger),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    logger.info("Get by uuid url=%s method=%s", request.url, request.method)
    try:
        task = use_case.get_by_id(task_id, timeout=timeout)
    except TaskRepositoryError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    return build_response(TaskOut.model_validate(task))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/",
    response_model=TaskEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Replace Task",
    description="Replace title and description of an existing task.",
    responses={
        202: {"description": "Task updated"},
        400: {"model": ErrorMessage, "description": "Invalid body, invalid id or storage failure"},
    },
)
def update_task(
    task_id: str,
    request: Request,
    body: Any = Body(None),
    use_case: TaskUseCase = Depends(get_task_use_case),
    logger: logging.Logger = Depends(get_logger),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    logger.info("Update url=%s method=%s", request.url, request.method)
    try:
        task = decode_task(body)
    except TaskValidationError as exc:
        logger.warning("Bad request: %s", exc.message)
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)
    try:
        updated = use_case.update(task_id, task, timeout=timeout)
    except TaskRepositoryError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    return build_response(TaskOut.model_validate(updated))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}/",
    response_model=TaskEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Delete Task",
    description="Delete a task by its UUID. Returns an empty envelope.",
    responses={
        202: {"description": "Task deleted"},
        404: {"model": ErrorMessage, "description": "Task not found or invalid id"},
    },
)
def delete_task(
    task_id: str,
    request: Request,
    use_case: TaskUseCase = Depends(get_task_use_case),
    logger: logging.Logger = Depends(get_logger),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    logger.info("Delete url=%s method=%s", request.url, request.method)
    try:
        use_case.delete(task_id, timeout=timeout)
    except TaskRepositoryError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    return build_response(None)
