"""
Update Progress Handler.
PUT /tasks/{taskId}/progress  {"progress": 40}
"""
from shared.auth import get_user_sub
from shared.errors import TaskError, InvalidStateError, ValidationError
from shared.lifecycle import ensure_assignee
from shared.logging import logger, log_event
from shared.models import TaskStatus
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, parse_body, get_path_param, to_decimal, utc_now, isoformat


def update_progress(store, task_id: str, worker_id: str, progress, now=None) -> dict:
    """Record worker-reported progress, clamped to 0-100. Only while IN_PROGRESS."""
    value = to_decimal(progress)
    if value is None:
        raise ValidationError(['progress: must be a number'])

    task = store.require(task_id)
    ensure_assignee(task, worker_id)
    if task['status'] != TaskStatus.IN_PROGRESS:
        raise InvalidStateError(
            f"Progress can only be reported while {TaskStatus.IN_PROGRESS}",
            current_status=task['status']
        )

    updated = dict(task)
    updated['progress'] = max(0, min(100, int(value)))
    updated['updatedAt'] = isoformat(now or utc_now())
    return store.save(updated, expected_status=TaskStatus.IN_PROGRESS)


def handler(event, context):
    log_event(event)

    worker_id = get_user_sub(event)
    if not worker_id:
        return format_response(401, {'error': 'Unauthorized'})

    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)

    try:
        task = update_progress(get_task_store(), task_id, worker_id, body.get('progress'))
        return format_response(200, task)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error updating progress on task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
