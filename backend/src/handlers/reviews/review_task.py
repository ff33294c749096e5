"""
Review Task Handler.
POST /tasks/{taskId}/review
{"action": "approve", "rating": 5, "feedback": "...", "notes": "..."}
{"action": "reject", "feedback": "missing category labels", "reopen": true}

Approval fixes the rating and the earnings in the same conditional write as
the status change. Rejection either reopens the task for the same assignees
or cancels it without payment. Only UNDER_REVIEW tasks can be reviewed, and
two reviewers racing on one task cannot both win.
"""
from decimal import Decimal

from shared.auth import get_user_sub, is_admin
from shared.compensation import compute_earnings, is_payable
from shared.errors import TaskError, ForbiddenError, InvalidStateError, ValidationError
from shared.lifecycle import apply_event, TaskEvent
from shared.logging import logger, log_event
from shared.models import (
    TaskStatus, ReviewAction, PaymentStatus, SUBMISSION_FIELDS,
    MAX_FEEDBACK_LENGTH, MAX_NOTES_LENGTH,
)
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, parse_body, get_path_param, utc_now, isoformat
from shared.validation import is_blank

RATING_RANGE = (1, 5)


def _parse_rating(rating):
    if isinstance(rating, bool):
        return None
    if isinstance(rating, int):
        return rating
    if isinstance(rating, float) and rating.is_integer():
        return int(rating)
    if isinstance(rating, Decimal) and rating.is_finite() and rating == rating.to_integral_value():
        return int(rating)
    return None


def _check_text(errors, name, value, limit):
    if value is None:
        return
    if not isinstance(value, str):
        errors.append(f'{name}: must be a string')
    elif len(value) > limit:
        errors.append(f'{name}: must be at most {limit} characters')


def _approve(task, rating, timestamp):
    approved = dict(task)
    approved['status'] = apply_event(task['status'], TaskEvent.APPROVE)
    approved['rating'] = rating
    approved['totalEarnings'] = compute_earnings(task['hourlyRate'], task['actualHours'])
    approved['completedAt'] = timestamp
    approved['paymentStatus'] = PaymentStatus.PENDING if is_payable(task) else PaymentStatus.NOT_PAYABLE
    approved['revisionRequested'] = False
    return approved


def _reject(task, feedback, reopen, timestamp):
    rejected = dict(task)
    rejected['status'] = apply_event(task['status'], TaskEvent.REJECT)
    rejected['totalEarnings'] = Decimal('0')

    if reopen:
        rejected['status'] = apply_event(rejected['status'], TaskEvent.REOPEN)
        for field in SUBMISSION_FIELDS:
            rejected.pop(field, None)
        rejected.pop('startedAt', None)
        rejected['progress'] = 0
        rejected['revisionRequested'] = True
        rejected['revisionNotes'] = feedback
    else:
        rejected['status'] = apply_event(rejected['status'], TaskEvent.CANCEL)
        rejected.pop('actualHours', None)
        rejected['cancelledAt'] = timestamp
    return rejected


def review(
    store,
    task_id: str,
    reviewer_id: str,
    action: str,
    rating=None,
    feedback: str = None,
    reopen=False,
    notes: str = None,
    now=None
) -> dict:
    """
    Apply an admin decision to a submitted task.

    Raises:
        NotFoundError: unknown task
        InvalidStateError: task is not UNDER_REVIEW, or another reviewer got there first
        ValidationError: bad action, rating, feedback or reopen flag
    """
    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)

    if action not in ReviewAction.ALL:
        raise ValidationError([f"action: must be one of {', '.join(ReviewAction.ALL)}"])

    if task['status'] != TaskStatus.UNDER_REVIEW:
        raise InvalidStateError(
            f"Task {task_id} is {task['status']}; only {TaskStatus.UNDER_REVIEW} tasks can be reviewed",
            current_status=task['status']
        )

    errors = []
    _check_text(errors, 'feedback', feedback, MAX_FEEDBACK_LENGTH)
    _check_text(errors, 'notes', notes, MAX_NOTES_LENGTH)

    if action == ReviewAction.APPROVE:
        value = _parse_rating(rating)
        low, high = RATING_RANGE
        if value is None or not low <= value <= high:
            errors.append(f'rating: must be a whole number from {low} to {high}')
    else:
        if is_blank(feedback) or not isinstance(feedback, str):
            errors.append('feedback: is required when rejecting')
        if not isinstance(reopen, bool):
            errors.append('reopen: must be true or false')
    if errors:
        raise ValidationError(errors)

    if action == ReviewAction.APPROVE:
        updated = _approve(task, value, timestamp)
    else:
        updated = _reject(task, feedback.strip(), reopen, timestamp)

    updated['reviewedBy'] = reviewer_id
    updated['reviewedAt'] = timestamp
    updated['updatedAt'] = timestamp
    # Feedback and notes describe this decision only; earlier cycles live in reviewHistory
    updated.pop('feedback', None)
    updated.pop('reviewNotes', None)
    if not is_blank(feedback):
        updated['feedback'] = feedback.strip()
    if not is_blank(notes):
        updated['reviewNotes'] = notes.strip()

    entry = {
        'action': action,
        'outcome': updated['status'],
        'reviewerId': reviewer_id,
        'actualHours': task.get('actualHours'),
        'at': timestamp,
    }
    if action == ReviewAction.APPROVE:
        entry['rating'] = value
    if not is_blank(feedback):
        entry['feedback'] = feedback.strip()
    updated['reviewHistory'] = list(task.get('reviewHistory', [])) + [entry]

    try:
        saved = store.save(updated, expected_status=TaskStatus.UNDER_REVIEW)
    except InvalidStateError:
        raise InvalidStateError(
            f"Task {task_id} was already reviewed by someone else",
            current_status=TaskStatus.UNDER_REVIEW
        )

    logger.info(f"Task {task_id} reviewed by {reviewer_id}: {action} -> {saved['status']}")
    return saved


def handler(event, context):
    log_event(event)

    reviewer_id = get_user_sub(event)
    if not reviewer_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can review tasks'))

    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)

    try:
        task = review(
            get_task_store(),
            task_id,
            reviewer_id,
            action=body.get('action'),
            rating=body.get('rating'),
            feedback=body.get('feedback'),
            reopen=body.get('reopen', False),
            notes=body.get('notes')
        )
        return format_response(200, task)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error reviewing task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
