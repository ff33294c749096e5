"""
Start Task Handler.
POST /tasks/{taskId}/start

A worker from the assignee pool starts the task. On a pooled task the first
worker to start claims it and the other candidates are removed.
"""
from shared.auth import get_user_sub
from shared.errors import TaskError
from shared.lifecycle import claim_task, ensure_assignee
from shared.logging import logger, log_event
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, get_path_param, utc_now, isoformat


def start_task(store, task_id: str, worker_id: str, now=None) -> dict:
    """
    Raises:
        NotFoundError: unknown task
        ForbiddenError: worker is not in the assignee pool
        InvalidStateError: task is not ASSIGNED, or another worker claimed it first
    """
    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)
    ensure_assignee(task, worker_id)

    claimed = claim_task(task, worker_id, timestamp)
    saved = store.save(claimed, expected_status=task['status'])

    dropped = [u for u in task.get('assignedTo', []) if u != worker_id]
    if dropped:
        logger.info(f"Task {task_id} claimed by {worker_id}; released candidates {dropped}")
    return saved


def handler(event, context):
    log_event(event)

    worker_id = get_user_sub(event)
    if not worker_id:
        return format_response(401, {'error': 'Unauthorized'})

    task_id = get_path_param(event, 'taskId')

    try:
        return format_response(200, start_task(get_task_store(), task_id, worker_id))

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error starting task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
