"""
Assign Task Handler.
POST /tasks/{taskId}/assign  {"userIds": ["u1", "u2"]}

Overwrites the task's assignee pool. Several candidates make a shared pool
until one of them starts the task. An empty list puts the task back to
AVAILABLE. Only tasks that are AVAILABLE or ASSIGNED can be (re)assigned.
"""
from shared.auth import get_user_sub, is_admin
from shared.authoring import normalize_assignees, require_users
from shared.errors import TaskError, ForbiddenError, ValidationError
from shared.lifecycle import apply_event, TaskEvent
from shared.logging import logger, log_event
from shared.task_store import get_task_store, get_user_store
from shared.utils import format_response, error_response, parse_body, get_path_param, utc_now, isoformat


def assign(store, task_id: str, user_ids, user_store=None, now=None) -> dict:
    """
    Replace the assignee pool of a task.

    Assigning the same pool again only refreshes updatedAt.

    Raises:
        NotFoundError: unknown task, or unknown users when user_store is given
        InvalidStateError: task is past ASSIGNED, or a concurrent write won
        ValidationError: user_ids is not an id or a list of ids
    """
    if user_ids is not None and not isinstance(user_ids, (str, list)):
        raise ValidationError(['userIds: must be a user id or a list of user ids'])

    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)
    assignees = normalize_assignees(user_ids)

    event = TaskEvent.ASSIGN if assignees else TaskEvent.UNASSIGN
    next_status = apply_event(task['status'], event)

    require_users(user_store, assignees)

    updated = dict(task)
    if assignees != task.get('assignedTo', []):
        updated['assignedAt'] = timestamp
    if not assignees:
        updated.pop('assignedAt', None)
    updated['assignedTo'] = assignees
    updated['status'] = next_status
    updated['updatedAt'] = timestamp

    saved = store.save(updated, expected_status=task['status'])
    logger.info(f"Task {task_id} {task['status']} -> {next_status}, assignedTo={assignees}")
    return saved


def handler(event, context):
    log_event(event)

    admin_id = get_user_sub(event)
    if not admin_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can assign tasks'))

    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)

    try:
        task = assign(get_task_store(), task_id, body.get('userIds'), user_store=get_user_store())
        return format_response(200, task)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error assigning task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
