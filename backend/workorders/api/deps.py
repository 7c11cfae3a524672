"""Reusable FastAPI dependencies wiring sessions, clock and notifier into services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends

from workorders.core.clock import Clock, get_clock
from workorders.db.session import get_session
from workorders.services.confirmations import ConfirmationService
from workorders.services.notifications.sinks import NotificationSink, get_notifier
from workorders.services.task_lifecycle import TaskLifecycleService

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

SESSION_DEP = Depends(get_session)
CLOCK_DEP = Depends(get_clock)
NOTIFIER_DEP = Depends(get_notifier)


def get_task_service(
    session: AsyncSession = SESSION_DEP,
    notifier: NotificationSink = NOTIFIER_DEP,
    clock: Clock = CLOCK_DEP,
) -> TaskLifecycleService:
    return TaskLifecycleService(session, notifier=notifier, clock=clock)


def get_confirmation_service(
    session: AsyncSession = SESSION_DEP,
    notifier: NotificationSink = NOTIFIER_DEP,
    clock: Clock = CLOCK_DEP,
) -> ConfirmationService:
    return ConfirmationService(session, notifier=notifier, clock=clock)


TASK_SERVICE_DEP = Depends(get_task_service)
CONFIRMATION_SERVICE_DEP = Depends(get_confirmation_service)
