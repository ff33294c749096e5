"""
Get Task Handler.
GET /tasks/{taskId}

Admins can read any task; workers only tasks they are assigned to.
"""
from shared.auth import get_user_sub, is_admin
from shared.errors import TaskError, ForbiddenError
from shared.logging import logger, log_event
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, get_path_param


def get_task_for(store, task_id: str, user_id: str, admin: bool) -> dict:
    task = store.require(task_id)
    if not admin and user_id not in task.get('assignedTo', []):
        raise ForbiddenError(f"Task {task_id} is not assigned to {user_id}")
    return task


def handler(event, context):
    log_event(event)

    user_id = get_user_sub(event)
    if not user_id:
        return format_response(401, {'error': 'Unauthorized'})

    task_id = get_path_param(event, 'taskId')

    try:
        task = get_task_for(get_task_store(), task_id, user_id, is_admin(event))
        return format_response(200, task)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error fetching task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
