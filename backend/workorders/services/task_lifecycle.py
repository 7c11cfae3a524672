"""Task state machine: creation fan-out, status transitions, enriched reads.

All writes for one operation share the caller's session and are committed
once; notifications go out only after the commit succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func
from sqlmodel import col

from workorders.core.errors import InvalidTransition, NotFound, ValidationError
from workorders.core.logging import get_logger
from workorders.models.employees import Employee
from workorders.models.locations import Building, Location, System
from workorders.models.tasks import TERMINAL_STATUSES, Task
from workorders.schemas.tasks import TaskCreate, TaskCreateResponse, TaskRead, TaskUpdate
from workorders.services.notifications.sinks import TASK_CREATED, TASK_DELETED, TASK_UPDATED
from workorders.services.recurrence import build_follow_up, clone_occurrence, initial_occurrence_dates
from workorders.services.settings_store import SettingsStore
from workorders.services.timing import compute_time_delta, evaluate_timing

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlmodel.ext.asyncio.session import AsyncSession

    from workorders.core.clock import Clock
    from workorders.services.notifications.sinks import NotificationSink

logger = get_logger(__name__)

# Statuses a client may request when creating a one-time task.
HONORED_CREATE_STATUSES = frozenset({"completed", "pending_approval", "not_completed"})
_PRIORITY_RANK = {"urgent": 0, "normal": 1, "optional": 2}
_TERMINAL = tuple(sorted(TERMINAL_STATUSES))


@dataclass(frozen=True)
class TransitionOutcome:
    changed: bool
    follow_up: Task | None = None


class TaskLifecycleService:
    """Owns every status write so timestamps and follow-ups stay consistent."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        notifier: NotificationSink,
        clock: Clock,
    ) -> None:
        self.session = session
        self.notifier = notifier
        self.clock = clock
        self.settings_store = SettingsStore(session)

    # Reads

    async def get_task(self, task_id: int) -> TaskRead:
        return await self.enrich(await self.load(task_id))

    async def load(self, task_id: int) -> Task:
        task = await Task.objects.by_id(task_id).first(self.session)
        if task is None:
            raise NotFound("Task not found", task_id=task_id)
        return task

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        employee_id: int | None = None,
        on_date: date | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TaskRead]:
        query = Task.objects.order_by(col(Task.start_date).desc(), col(Task.start_time).desc())
        if status is not None:
            query = query.filter(col(Task.status) == status)
        if employee_id is not None:
            query = query.filter(col(Task.employee_id) == employee_id)
        if on_date is not None:
            query = query.filter(col(Task.start_date) == on_date)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return await self.enrich_many(await query.all(self.session))

    async def list_today(self) -> list[TaskRead]:
        """Open tasks dated today, most urgent first then by start time."""
        priority_rank = case(_PRIORITY_RANK, value=col(Task.priority), else_=len(_PRIORITY_RANK))
        tasks = await (
            Task.objects.filter(
                col(Task.start_date) == self.clock.today(),
                col(Task.status).not_in(_TERMINAL),
            )
            .order_by(priority_rank, col(Task.start_time).asc(), col(Task.id).asc())
            .all(self.session)
        )
        return await self.enrich_many(tasks)

    async def list_overdue(self) -> list[TaskRead]:
        """Open one-time tasks whose deadline date has already passed."""
        deadline_date = func.coalesce(col(Task.due_date), col(Task.start_date))
        tasks = await (
            Task.objects.filter(
                col(Task.is_recurring).is_(False),
                deadline_date < self.clock.today(),
                col(Task.status).not_in(_TERMINAL),
            )
            .order_by(col(Task.start_date).asc(), col(Task.start_time).asc())
            .all(self.session)
        )
        return await self.enrich_many(tasks)

    async def enrich(self, task: Task) -> TaskRead:
        return (await self.enrich_many([task]))[0]

    async def enrich_many(self, tasks: Sequence[Task]) -> list[TaskRead]:
        return await enrich_tasks(self.session, tasks, clock=self.clock)

    # Writes

    async def create_task(self, payload: TaskCreate) -> TaskCreateResponse:
        """Create a one-time task, or materialize the initial recurring batch."""
        now = self.clock.now()
        fields = payload.model_dump(exclude={"status", "is_recurring"})
        template = Task(**fields, is_recurring=bool(payload.is_recurring), created_at=now, updated_at=now)

        if template.is_recurring:
            dates = initial_occurrence_dates(
                template.frequency,
                template.start_date,
                template.weekly_days,
                today=self.clock.today(now),
            )
            if not dates:
                raise ValidationError(
                    "Recurrence produced no occurrences",
                    frequency=template.frequency,
                    weekly_days=template.weekly_days,
                )
            created = [clone_occurrence(template, start_date=day, now=now) for day in dates]
        else:
            await self._apply_create_status(template, payload.status, now=now)
            created = [template]

        self.session.add_all(created)
        await self.session.commit()
        for task in created:
            await self.session.refresh(task)

        first = await self.enrich(created[0])
        logger.info(
            "task.lifecycle.created",
            extra={
                "task_id": first.id,
                "frequency": template.frequency,
                "created_count": len(created),
                "status": first.status,
            },
        )
        self._emit(TASK_CREATED, first)
        return TaskCreateResponse(task=first, created_count=len(created))

    async def _apply_create_status(self, task: Task, requested: str | None, *, now: datetime) -> None:
        if requested in HONORED_CREATE_STATUSES:
            task.status = "draft"
            await self.apply_transition(task, requested, now=now)
            return
        workday_end = await self.settings_store.workday_end_time()
        deadline_day = task.due_date or task.start_date
        if deadline_day == self.clock.today(now) and self.clock.civil_time(now) >= workday_end:
            # Already past today's close; the sweep would never see it open.
            task.status = "not_completed"
        else:
            task.status = "draft"

    async def update_task(self, task_id: int, payload: TaskUpdate) -> TaskRead:
        task = await self.load(task_id)
        updates = payload.model_dump(exclude_unset=True)
        if not updates:
            return await self.enrich(task)
        self._reconcile_schedule(task, updates)
        for key, value in updates.items():
            setattr(task, key, value)
        if "frequency" in updates:
            task.is_recurring = task.frequency != "one-time"
        if task.is_terminal and task.completed_at is not None:
            # History reads the stored delta, so it follows schedule edits.
            workday_end = await self.settings_store.workday_end_time()
            task.time_delta_minutes = compute_time_delta(task, workday_end=workday_end, clock=self.clock)
        task.updated_at = self.clock.now()
        self.session.add(task)
        await self.session.commit()
        await self.session.refresh(task)
        read = await self.enrich(task)
        logger.info("task.lifecycle.updated", extra={"task_id": task_id, "fields": sorted(updates)})
        self._emit(TASK_UPDATED, read)
        return read

    @staticmethod
    def _reconcile_schedule(task: Task, updates: dict[str, Any]) -> None:
        """Apply the create-time scheduling rules to the merged task, before any write."""
        frequency = updates.get("frequency", task.frequency)
        is_recurring = frequency != "one-time" if "frequency" in updates else task.is_recurring
        if is_recurring:
            if not updates.get("start_time", task.start_time):
                raise ValidationError("start_time is required for recurring tasks", task_id=task.id)
            if updates.get("due_date") is not None:
                raise ValidationError("due_date is only valid for one-time tasks", task_id=task.id)
            if task.due_date is not None:
                updates["due_date"] = None
        if frequency != "daily" and updates.get("weekly_days", task.weekly_days) is not None:
            updates["weekly_days"] = None

    async def toggle_star(self, task_id: int) -> TaskRead:
        task = await self.load(task_id)
        task.is_starred = not task.is_starred
        task.updated_at = self.clock.now()
        self.session.add(task)
        await self.session.commit()
        await self.session.refresh(task)
        read = await self.enrich(task)
        self._emit(TASK_UPDATED, read)
        return read

    async def delete_task(self, task_id: int) -> None:
        task = await self.load(task_id)
        await self.session.delete(task)
        await self.session.commit()
        logger.info("task.lifecycle.deleted", extra={"task_id": task_id})
        self.notifier.emit(TASK_DELETED, {"id": task_id})

    async def set_status(self, task_id: int, status: str) -> TaskRead:
        """Direct status write, including completion without approval."""
        task = await self.load(task_id)
        return await self.transition(task, status)

    async def approve(self, task_id: int) -> TaskRead:
        """Manager approval of a task waiting in `pending_approval`."""
        task = await self.load(task_id)
        if task.status != "pending_approval":
            raise InvalidTransition(
                "Only tasks pending approval can be approved",
                task_id=task_id,
                status=task.status,
            )
        return await self.transition(task, "completed")

    async def transition(self, task: Task, status: str) -> TaskRead:
        """Apply, commit and publish one status change."""
        outcome = await self.apply_transition(task, status)
        if not outcome.changed:
            return await self.enrich(task)
        await self.session.commit()
        await self.publish_transition(task, outcome)
        return await self.enrich(task)

    async def apply_transition(
        self,
        task: Task,
        status: str,
        *,
        now: datetime | None = None,
    ) -> TransitionOutcome:
        """Stage a status change and its side effects without committing.

        Terminal tasks never move again. Re-applying the current status is a
        no-op. Entering `completed` stamps `completed_at` once, records the
        completion delta and stages the recurring follow-up.
        """
        if task.status == status:
            return TransitionOutcome(changed=False)
        if task.is_terminal:
            raise InvalidTransition(
                "Task is already closed",
                task_id=task.id,
                status=task.status,
                requested_status=status,
            )
        now = now or self.clock.now()
        previous = task.status
        task.status = status
        task.updated_at = now
        if status == "sent" and task.sent_at is None:
            task.sent_at = now

        follow_up: Task | None = None
        if status in TERMINAL_STATUSES:
            if task.completed_at is None:
                task.completed_at = now
            workday_end = await self.settings_store.workday_end_time()
            task.time_delta_minutes = compute_time_delta(task, workday_end=workday_end, clock=self.clock)
            if status == "completed":
                follow_up = build_follow_up(task, now=now)
        self.session.add(task)
        if follow_up is not None:
            self.session.add(follow_up)

        logger.info(
            "task.lifecycle.transition",
            extra={
                "task_id": task.id,
                "from_status": previous,
                "to_status": status,
                "follow_up_date": follow_up.start_date.isoformat() if follow_up else None,
            },
        )
        return TransitionOutcome(changed=True, follow_up=follow_up)

    async def publish_transition(self, task: Task, outcome: TransitionOutcome) -> None:
        """Emit notifications for a committed transition."""
        await self.session.refresh(task)
        self._emit(TASK_UPDATED, await self.enrich(task))
        if outcome.follow_up is not None:
            await self.session.refresh(outcome.follow_up)
            self._emit(TASK_CREATED, await self.enrich(outcome.follow_up))

    def _emit(self, event_name: str, read: TaskRead) -> None:
        self.notifier.emit(event_name, read.model_dump(mode="json"))


async def _names_by_id(
    session: AsyncSession,
    model: type[Employee] | type[System] | type[Location] | type[Building],
    ids: Iterable[int | None],
) -> dict[int, str]:
    wanted = {identity for identity in ids if identity is not None}
    if not wanted:
        return {}
    rows = await model.objects.filter(col(model.id).in_(wanted)).all(session)
    return {row.id: row.name for row in rows if row.id is not None}


async def enrich_tasks(
    session: AsyncSession,
    tasks: Sequence[Task],
    *,
    clock: Clock,
) -> list[TaskRead]:
    """Attach directory names and computed timing to each task."""
    if not tasks:
        return []
    workday_end = await SettingsStore(session).workday_end_time()
    now = clock.now()
    employees = await _names_by_id(session, Employee, (t.employee_id for t in tasks))
    systems = await _names_by_id(session, System, (t.system_id for t in tasks))
    locations = await _names_by_id(session, Location, (t.location_id for t in tasks))
    buildings = await _names_by_id(session, Building, (t.building_id for t in tasks))

    reads: list[TaskRead] = []
    for task in tasks:
        timing = evaluate_timing(task, now=now, workday_end=workday_end, clock=clock)
        data: dict[str, Any] = task.model_dump()
        data.update(
            employee_name=employees.get(task.employee_id),
            system_name=systems.get(task.system_id),
            location_name=locations.get(task.location_id),
            building_name=buildings.get(task.building_id),
            estimated_end=timing.estimated_end,
            estimated_end_time=timing.estimated_end_time,
            is_late=timing.is_late,
            minutes_remaining=timing.minutes_remaining,
            minutes_remaining_text=timing.minutes_remaining_text,
            timing_status=timing.timing_status,
            time_delta_minutes=timing.time_delta_minutes,
            time_delta_text=timing.time_delta_text,
        )
        reads.append(TaskRead.model_validate(data))
    return reads
