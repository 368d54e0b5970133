"""
Task API endpoints.

CRUD for tasks in the requester's organization.
"""
from typing import Optional
from uuid import UUID
from ninja import Router
from django.http import HttpRequest

from apps.identity.api import require_auth
from .dtos import MessageOut, TaskIn, TaskListOut, TaskOut, TaskUpdateIn
from .services import get_task_service

router = Router(tags=["Tasks"])


@router.get("", response=TaskListOut, auth=None)
def list_tasks(
    request: HttpRequest,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[UUID] = None,
):
    """
    List the organization's tasks, newest first.

    Query Parameters:
    - status: To Do, In Progress, Done, Archived
    - priority: Low, Medium, High
    - assigned_to: user id
    """
    user = require_auth(request)
    tasks = get_task_service().list_tasks(user, status=status, priority=priority, assigned_to=assigned_to)
    return {"count": len(tasks), "data": tasks}


@router.post("", response={201: TaskOut}, auth=None)
def create_task(request: HttpRequest, payload: TaskIn):
    user = require_auth(request)
    return 201, get_task_service().create_task(user, payload)


@router.get("/{uuid:task_id}", response=TaskOut, auth=None)
def get_task(request: HttpRequest, task_id: UUID):
    user = require_auth(request)
    return get_task_service().get_task(user, task_id)


@router.put("/{uuid:task_id}", response=TaskOut, auth=None)
def update_task(request: HttpRequest, task_id: UUID, payload: TaskUpdateIn):
    """
    Partially update a task. Send ``"assigned_to": null`` to unassign.
    """
    user = require_auth(request)
    return get_task_service().update_task(user, task_id, payload.dict(exclude_unset=True))


@router.delete("/{uuid:task_id}", response=MessageOut, auth=None)
def delete_task(request: HttpRequest, task_id: UUID):
    user = require_auth(request)
    get_task_service().delete_task(user, task_id)
    return {"message": "Task removed"}
