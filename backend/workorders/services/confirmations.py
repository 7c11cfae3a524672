"""Capability tokens letting an assignee view and update a fixed set of tasks.

A token is bound at issuance to one employee and an immutable list of task
ids. It expires after a fixed TTL and grants nothing beyond status updates,
acknowledgement and completion submission for exactly those tasks.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlmodel import col

from workorders.core.config import settings
from workorders.core.errors import Conflict, Expired, Forbidden, NotFound, ValidationError
from workorders.core.logging import get_logger
from workorders.models.employees import Employee
from workorders.models.task_confirmations import TaskConfirmation
from workorders.models.tasks import Task
from workorders.schemas.confirmations import (
    ConfirmationAcknowledged,
    ConfirmationEmployee,
    ConfirmationIssued,
    ConfirmationRead,
)
from workorders.services.task_lifecycle import TaskLifecycleService, TransitionOutcome

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.core.clock import Clock
    from workorders.schemas.tasks import TaskRead
    from workorders.services.notifications.sinks import NotificationSink

logger = get_logger(__name__)

TOKEN_BYTES = 32
# Statuses an assignee may set through a confirmation link.
ASSIGNEE_STATUSES = ("draft", "sent", "in_progress", "completed")


class ConfirmationService:
    """Issue, resolve and act on confirmation tokens."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        notifier: NotificationSink,
        clock: Clock,
        ttl_days: int | None = None,
    ) -> None:
        self.session = session
        self.clock = clock
        self.ttl = timedelta(days=ttl_days or settings.confirmation_token_ttl_days)
        self.lifecycle = TaskLifecycleService(session, notifier=notifier, clock=clock)

    def link_for(self, token: str) -> str | None:
        base = settings.confirmation_base_url.rstrip("/")
        return f"{base}/confirm/{token}" if base else None

    async def issue(self, employee_id: int, task_ids: list[int]) -> ConfirmationIssued:
        """Mint a token over `task_ids` (order kept, duplicates dropped)."""
        bound = list(dict.fromkeys(task_ids))
        if not bound:
            raise ValidationError("task_ids must not be empty", employee_id=employee_id)
        if await self.session.get(Employee, employee_id) is None:
            raise NotFound("Employee not found", employee_id=employee_id)

        now = self.clock.now()
        confirmation = TaskConfirmation(
            token=secrets.token_hex(TOKEN_BYTES),
            employee_id=employee_id,
            task_ids=bound,
            expires_at=now + self.ttl,
            created_at=now,
        )
        self.session.add(confirmation)
        await self.session.commit()
        await self.session.refresh(confirmation)
        logger.info(
            "confirmation.issued",
            extra={
                "confirmation_id": confirmation.id,
                "employee_id": employee_id,
                "task_count": len(bound),
                "expires_at": confirmation.expires_at.isoformat(),
            },
        )
        return ConfirmationIssued(
            token=confirmation.token,
            employee_id=employee_id,
            task_ids=bound,
            expires_at=confirmation.expires_at,
            url=self.link_for(confirmation.token),
        )

    async def _load_active(self, token: str) -> TaskConfirmation:
        confirmation = await TaskConfirmation.objects.filter_by(token=token).first(self.session)
        if confirmation is None:
            raise NotFound("Confirmation token not found")
        if self.clock.now() > confirmation.expires_at:
            raise Expired("Confirmation token has expired", expires_at=confirmation.expires_at.isoformat())
        return confirmation

    async def _bound_tasks(self, confirmation: TaskConfirmation) -> list[Task]:
        if not confirmation.task_ids:
            return []
        rows = await (
            Task.objects.filter(col(Task.id).in_(confirmation.task_ids))
            .order_by(
                col(Task.start_time).asc().nulls_last(),
                col(Task.start_date).asc(),
                col(Task.id).asc(),
            )
            .all(self.session)
        )
        return list(rows)

    async def _bound_task(self, confirmation: TaskConfirmation, task_id: int) -> Task:
        if task_id not in confirmation.task_ids:
            raise Forbidden("Task is not covered by this confirmation", task_id=task_id)
        return await self.lifecycle.load(task_id)

    async def resolve(self, token: str) -> ConfirmationRead:
        confirmation = await self._load_active(token)
        employee = await self.session.get(Employee, confirmation.employee_id)
        tasks = await self.lifecycle.enrich_many(await self._bound_tasks(confirmation))
        return ConfirmationRead(
            employee=ConfirmationEmployee.model_validate(employee.model_dump()) if employee else None,
            tasks=tasks,
            is_acknowledged=confirmation.is_acknowledged,
            acknowledged_at=confirmation.acknowledged_at,
            expires_at=confirmation.expires_at,
        )

    async def update_task_status(self, token: str, task_id: int, status: str) -> TaskRead:
        if status not in ASSIGNEE_STATUSES:
            raise ValidationError(
                "Status is not allowed through a confirmation link",
                status=status,
                allowed=list(ASSIGNEE_STATUSES),
            )
        confirmation = await self._load_active(token)
        task = await self._bound_task(confirmation, task_id)
        return await self.lifecycle.transition(task, status)

    async def acknowledge(self, token: str) -> ConfirmationAcknowledged:
        """Acknowledge once; later calls succeed without side effects."""
        confirmation = await self._load_active(token)
        if confirmation.is_acknowledged:
            return ConfirmationAcknowledged(
                already_acknowledged=True,
                acknowledged_at=confirmation.acknowledged_at,
            )

        now = self.clock.now()
        claim = (
            update(TaskConfirmation)
            .where(
                col(TaskConfirmation.id) == confirmation.id,
                col(TaskConfirmation.is_acknowledged).is_(False),
            )
            .values(is_acknowledged=True, acknowledged_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.exec(claim)  # type: ignore[call-overload]
        if not result.rowcount:
            # A concurrent acknowledgement claimed the token first.
            await self.session.rollback()
            await self.session.refresh(confirmation)
            return ConfirmationAcknowledged(
                already_acknowledged=True,
                acknowledged_at=confirmation.acknowledged_at,
            )
        confirmation.is_acknowledged = True
        confirmation.acknowledged_at = now

        moved: list[Task] = []
        for task in await self._bound_tasks(confirmation):
            if task.is_terminal or task.status == "pending_approval":
                continue
            outcome = await self.lifecycle.apply_transition(task, "in_progress", now=now)
            stamped = task.acknowledged_at is None
            if stamped:
                task.acknowledged_at = now
                task.updated_at = now
                self.session.add(task)
            if outcome.changed or stamped:
                moved.append(task)
        await self.session.commit()

        for task in moved:
            await self.lifecycle.publish_transition(task, TransitionOutcome(changed=True))
        logger.info(
            "confirmation.acknowledged",
            extra={"confirmation_id": confirmation.id, "task_count": len(moved)},
        )
        return ConfirmationAcknowledged(
            already_acknowledged=False,
            acknowledged_at=now,
            affected_task_ids=[task.id for task in moved if task.id is not None],
        )

    async def submit_completion(self, token: str, task_id: int, note: str | None = None) -> TaskRead:
        """Record the assignee's completion report and queue it for approval."""
        confirmation = await self._load_active(token)
        task = await self._bound_task(confirmation, task_id)
        if task.status == "pending_approval" or task.is_terminal:
            raise Conflict(
                "Completion was already submitted for this task",
                task_id=task_id,
                status=task.status,
            )

        now = self.clock.now()
        if note and note.strip():
            task.completion_note = note.strip()
        if task.completed_at is None:
            task.completed_at = now
        outcome = await self.lifecycle.apply_transition(task, "pending_approval", now=now)
        await self.session.commit()
        await self.lifecycle.publish_transition(task, outcome)
        logger.info(
            "confirmation.completion_submitted",
            extra={"confirmation_id": confirmation.id, "task_id": task_id},
        )
        return await self.lifecycle.enrich(task)
