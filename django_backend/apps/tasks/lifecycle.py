"""
Task lifecycle rules.

Status may move between any two states. The only side effect of a status
write is on ``completed_at``: it is stamped when a task becomes completed and
cleared whenever the task is in any other state. Derived fields are computed
from the stored ones at read time and never persisted.
"""
from datetime import datetime, time

from django.utils import timezone

from .models import TaskPriority, TaskStatus

PRIORITY_COLORS = {
    TaskPriority.LOW.value: "#10B981",
    TaskPriority.MEDIUM.value: "#F59E0B",
    TaskPriority.HIGH.value: "#F97316",
    TaskPriority.URGENT.value: "#EF4444",
}
DEFAULT_PRIORITY_COLOR = "#6B7280"


def start_of_day(now=None):
    """Midnight of the current local day, as an aware datetime."""
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    return timezone.make_aware(datetime.combine(today, time.min))


def validate_due_date(value, now=None):
    """Return an error message if ``value`` falls before today, else None."""
    if value is None:
        return "Due date is required"
    if value < start_of_day(now):
        return "Due date cannot be in the past"
    return None


def apply_status(task, status, now=None):
    """Set ``task.status`` and keep ``completed_at`` consistent with it.

    Returns the names of the fields that have to be written.
    """
    task.status = status
    if status == TaskStatus.COMPLETED:
        if task.completed_at is None:
            task.completed_at = now or timezone.now()
    else:
        task.completed_at = None
    return ["status", "completed_at"]


def is_overdue(task, now=None) -> bool:
    if task.status == TaskStatus.COMPLETED:
        return False
    return (now or timezone.now()) > task.due_date


def days_until_due(task, now=None) -> int:
    """Whole calendar days from today to the due date; negative once past."""
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    due = timezone.localtime(task.due_date).date()
    return (due - today).days


def priority_color(priority) -> str:
    return PRIORITY_COLORS.get(priority, DEFAULT_PRIORITY_COLOR)


def derive_view(task, now=None):
    now = now or timezone.now()
    return {
        "isOverdue": is_overdue(task, now),
        "daysUntilDue": days_until_due(task, now),
        "priorityColor": priority_color(task.priority),
    }
