"""
Create Task Batch Handler.
POST /tasks/bulk  {"category": "AI_TRAINING", "count": 10, "difficulty": "intermediate"}

Generates up to MAX_BULK_TASKS tasks from the category template's examples,
all sharing one batchId. Writes are independent; a partial failure answers 207
with the tasks that were created and the per-task errors.
"""
from shared.auth import get_user_sub, is_admin
from shared.authoring import create_bulk
from shared.errors import TaskError, ForbiddenError
from shared.logging import logger, log_event
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, parse_body


def handler(event, context):
    log_event(event)

    admin_id = get_user_sub(event)
    if not admin_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can create tasks'))

    body = parse_body(event)

    try:
        tasks = create_bulk(
            get_task_store(),
            category=body.get('category'),
            count=body.get('count'),
            difficulty=body.get('difficulty'),
            created_by=admin_id
        )
        return format_response(201, {
            'message': f'Created {len(tasks)} tasks',
            'batchId': tasks[0]['batchId'],
            'tasks': tasks
        })

    except TaskError as e:
        logger.warning(f"Bulk create did not complete: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating task batch: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
