"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from workorders.models.app_settings import AppSetting
from workorders.models.employees import Employee
from workorders.models.locations import Building, Location, System
from workorders.models.task_confirmations import TaskConfirmation
from workorders.models.tasks import Task

__all__ = [
    "AppSetting",
    "Building",
    "Employee",
    "Location",
    "System",
    "Task",
    "TaskConfirmation",
]
