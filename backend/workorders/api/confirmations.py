"""Unauthenticated confirmation-link endpoints, scoped by token."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from workorders.api.deps import CONFIRMATION_SERVICE_DEP
from workorders.schemas.confirmations import (
    ConfirmationAcknowledged,
    ConfirmationComplete,
    ConfirmationGenerate,
    ConfirmationIssued,
    ConfirmationRead,
    ConfirmationTaskStatusUpdate,
)
from workorders.schemas.tasks import TaskRead

if TYPE_CHECKING:
    from workorders.services.confirmations import ConfirmationService

router = APIRouter(prefix="/confirm", tags=["confirmations"])


@router.post("/generate", response_model=ConfirmationIssued, status_code=status.HTTP_201_CREATED)
async def generate_confirmation(
    payload: ConfirmationGenerate,
    service: ConfirmationService = CONFIRMATION_SERVICE_DEP,
) -> ConfirmationIssued:
    """Issue a token binding an employee to the given tasks."""
    return await service.issue(payload.employee_id, payload.task_ids)


@router.get("/{token}", response_model=ConfirmationRead)
async def resolve_confirmation(
    token: str,
    service: ConfirmationService = CONFIRMATION_SERVICE_DEP,
) -> ConfirmationRead:
    return await service.resolve(token)


@router.put("/{token}/task/{task_id}", response_model=TaskRead)
async def update_confirmation_task(
    token: str,
    task_id: int,
    payload: ConfirmationTaskStatusUpdate,
    service: ConfirmationService = CONFIRMATION_SERVICE_DEP,
) -> TaskRead:
    return await service.update_task_status(token, task_id, payload.status)


@router.post("/{token}/acknowledge", response_model=ConfirmationAcknowledged)
async def acknowledge_confirmation(
    token: str,
    service: ConfirmationService = CONFIRMATION_SERVICE_DEP,
) -> ConfirmationAcknowledged:
    """Acknowledge receipt; repeating the call is a successful no-op."""
    return await service.acknowledge(token)


@router.post("/{token}/complete", response_model=TaskRead)
async def submit_confirmation_completion(
    token: str,
    payload: ConfirmationComplete,
    service: ConfirmationService = CONFIRMATION_SERVICE_DEP,
) -> TaskRead:
    """Report one task done; it then waits for manager approval."""
    return await service.submit_completion(token, payload.task_id, payload.note)
