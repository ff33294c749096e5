"""
Task state machine.

The transition table is plain data: (current status, event) -> next status.
Operations ask apply_event() for the next status before writing anything, so
a task can only move along edges listed here.
"""
from decimal import Decimal
from typing import Any, Dict, List

from .compensation import compute_earnings
from .errors import ForbiddenError, InvalidStateError
from .models import TaskStatus
from .utils import to_decimal


class TaskEvent:
    ASSIGN = 'assign'
    UNASSIGN = 'unassign'
    START = 'start'
    SUBMIT = 'submit'
    APPROVE = 'approve'
    REJECT = 'reject'
    REOPEN = 'reopen'
    CANCEL = 'cancel'


TRANSITIONS = {
    (TaskStatus.AVAILABLE, TaskEvent.ASSIGN): TaskStatus.ASSIGNED,
    (TaskStatus.AVAILABLE, TaskEvent.UNASSIGN): TaskStatus.AVAILABLE,
    (TaskStatus.ASSIGNED, TaskEvent.ASSIGN): TaskStatus.ASSIGNED,
    (TaskStatus.ASSIGNED, TaskEvent.UNASSIGN): TaskStatus.AVAILABLE,
    (TaskStatus.ASSIGNED, TaskEvent.START): TaskStatus.IN_PROGRESS,
    (TaskStatus.IN_PROGRESS, TaskEvent.SUBMIT): TaskStatus.UNDER_REVIEW,
    (TaskStatus.UNDER_REVIEW, TaskEvent.APPROVE): TaskStatus.APPROVED,
    (TaskStatus.UNDER_REVIEW, TaskEvent.REJECT): TaskStatus.REJECTED,
    (TaskStatus.REJECTED, TaskEvent.REOPEN): TaskStatus.ASSIGNED,
    (TaskStatus.REJECTED, TaskEvent.CANCEL): TaskStatus.CANCELLED,
}


def apply_event(status: str, event: str) -> str:
    """
    Return the status a task moves to when event happens in status.

    Raises:
        InvalidStateError: the table has no such edge
    """
    next_status = TRANSITIONS.get((status, event))
    if next_status is None:
        if status in TaskStatus.TERMINAL:
            message = f"Task is already {status} and cannot {event}"
        else:
            message = f"Cannot {event} a task in status {status}"
        raise InvalidStateError(message, current_status=status)
    return next_status


def ensure_assignee(task: Dict[str, Any], worker_id: str) -> None:
    """
    Raises:
        ForbiddenError: worker_id is not in the task's assignee pool
    """
    if worker_id not in task.get('assignedTo', []):
        raise ForbiddenError(f"Worker {worker_id} is not assigned to task {task['taskId']}")


def claim_task(task: Dict[str, Any], worker_id: str, timestamp: str) -> Dict[str, Any]:
    """
    ASSIGNED -> IN_PROGRESS for worker_id.

    The first worker to start a pooled task claims it; the other candidates
    are dropped from assignedTo. Returns a new record, the input is untouched.
    """
    claimed = dict(task)
    claimed['status'] = apply_event(task['status'], TaskEvent.START)
    claimed['assignedTo'] = [worker_id]
    claimed['startedAt'] = timestamp
    claimed['updatedAt'] = timestamp
    return claimed


def invariant_violations(task: Dict[str, Any]) -> List[str]:
    """
    List every record-level invariant the task breaks. Empty when consistent.
    """
    violations = []
    status = task.get('status')

    if status not in TaskStatus.ALL or status == TaskStatus.REJECTED:
        violations.append(f'status {status!r} is not a resting status')

    if ('rating' in task) != (status == TaskStatus.APPROVED):
        violations.append('rating must be present exactly when the task is APPROVED')

    with_hours = status in (TaskStatus.UNDER_REVIEW, TaskStatus.APPROVED)
    if ('actualHours' in task) != with_hours:
        violations.append('actualHours must be present exactly when submitted or approved')

    earnings = to_decimal(task.get('totalEarnings')) or Decimal('0')
    if status == TaskStatus.APPROVED and 'actualHours' in task:
        expected = compute_earnings(task.get('hourlyRate'), task.get('actualHours'))
        if earnings != expected:
            violations.append(f'totalEarnings {earnings} != {expected}')
    elif status != TaskStatus.APPROVED and earnings != 0:
        violations.append('totalEarnings must be 0 unless APPROVED')

    if status != TaskStatus.AVAILABLE and status != TaskStatus.CANCELLED and not task.get('assignedTo'):
        violations.append(f'{status} task has nobody assigned')
    if status == TaskStatus.AVAILABLE and task.get('assignedTo'):
        violations.append('AVAILABLE task still has assignees')

    return violations
