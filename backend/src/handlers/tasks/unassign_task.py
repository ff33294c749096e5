"""
Unassign Task Handler.
DELETE /tasks/{taskId}/assign

Clears the assignee pool and returns the task to AVAILABLE. Not possible once
a worker has started or submitted.
"""
from shared.auth import get_user_sub, is_admin
from shared.errors import TaskError, ForbiddenError
from shared.lifecycle import apply_event, TaskEvent
from shared.logging import logger, log_event
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, get_path_param, utc_now, isoformat


def unassign(store, task_id: str, now=None) -> dict:
    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)

    updated = dict(task)
    updated['status'] = apply_event(task['status'], TaskEvent.UNASSIGN)
    updated['assignedTo'] = []
    updated['updatedAt'] = timestamp
    updated.pop('assignedAt', None)

    saved = store.save(updated, expected_status=task['status'])
    logger.info(f"Task {task_id} unassigned")
    return saved


def handler(event, context):
    log_event(event)

    admin_id = get_user_sub(event)
    if not admin_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can unassign tasks'))

    task_id = get_path_param(event, 'taskId')

    try:
        return format_response(200, unassign(get_task_store(), task_id))

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error unassigning task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
