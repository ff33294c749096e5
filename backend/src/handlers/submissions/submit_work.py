"""
Submit Work Handler.
POST /tasks/{taskId}/submit
{"notes": "...", "deliverables": ["s3://bucket/key"], "actualHours": 2.5}

Moves the task to UNDER_REVIEW. Submitting straight from ASSIGNED starts the
task on the worker's behalf first, so a pooled task is claimed by whoever
submits. The admin review queue is every task in UNDER_REVIEW.
"""
from shared.auth import get_user_sub
from shared.errors import TaskError, InvalidStateError, ValidationError
from shared.lifecycle import apply_event, claim_task, ensure_assignee, TaskEvent
from shared.logging import logger, log_event
from shared.models import TaskStatus, MAX_NOTES_LENGTH
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, parse_body, get_path_param, to_decimal, utc_now, isoformat
from shared.validation import is_blank


def _deliverable_list(deliverables) -> list:
    if isinstance(deliverables, str):
        deliverables = [deliverables]
    if not isinstance(deliverables, list):
        return []
    return [str(d).strip() for d in deliverables if not is_blank(d)]


def submit(store, task_id: str, worker_id: str, notes=None, deliverables=None, actual_hours=None, now=None) -> dict:
    """
    Record a worker's submission.

    Checks run in this order: task exists, worker is assigned, task accepts
    submissions, payload is valid.

    Raises:
        NotFoundError, ForbiddenError, InvalidStateError, ValidationError
    """
    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)
    ensure_assignee(task, worker_id)

    if task['status'] not in TaskStatus.SUBMITTABLE:
        raise InvalidStateError(
            f"Task {task_id} is {task['status']} and does not accept submissions",
            current_status=task['status']
        )

    errors = []
    hours = to_decimal(actual_hours)
    if hours is None or hours <= 0:
        errors.append('actualHours: must be greater than 0')
    files = _deliverable_list(deliverables)
    if not files:
        errors.append('deliverables: at least one deliverable is required')
    if notes is not None and not isinstance(notes, str):
        errors.append('notes: must be a string')
    elif notes and len(notes) > MAX_NOTES_LENGTH:
        errors.append(f'notes: must be at most {MAX_NOTES_LENGTH} characters')
    if errors:
        raise ValidationError(errors)

    if task['status'] == TaskStatus.ASSIGNED:
        updated = claim_task(task, worker_id, timestamp)
    else:
        updated = dict(task)

    updated['status'] = apply_event(updated['status'], TaskEvent.SUBMIT)
    updated['submissionNotes'] = (notes or '').strip()
    updated['submissionFiles'] = files
    updated['actualHours'] = hours
    updated['submittedAt'] = timestamp
    updated['updatedAt'] = timestamp
    updated['progress'] = 100
    updated['revisionRequested'] = False

    saved = store.save(updated, expected_status=task['status'])
    logger.info(f"Task {task_id} submitted by {worker_id} ({hours}h, {len(files)} files)")
    return saved


def handler(event, context):
    log_event(event)

    worker_id = get_user_sub(event)
    if not worker_id:
        return format_response(401, {'error': 'Unauthorized'})

    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)

    try:
        task = submit(
            get_task_store(),
            task_id,
            worker_id,
            notes=body.get('notes'),
            deliverables=body.get('deliverables'),
            actual_hours=body.get('actualHours')
        )
        return format_response(200, task)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error submitting task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
