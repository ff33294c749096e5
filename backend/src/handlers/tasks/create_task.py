"""
Create Task Handler.
POST /tasks

Body carries the task fields. With "templateId" the task is seeded from that
category template and the remaining fields override its defaults; without it
the fields are taken as they are (freeform).
"""
from shared.auth import get_user_sub, is_admin
from shared.authoring import create_from_template, create_freeform
from shared.errors import TaskError, ForbiddenError
from shared.logging import logger, log_event
from shared.task_store import get_task_store, get_user_store
from shared.utils import format_response, error_response, parse_body


def create_task(store, body: dict, created_by: str, now=None, user_store=None) -> dict:
    """Route a create request to the template or freeform path."""
    fields = dict(body)
    template_id = fields.pop('templateId', None)
    if template_id:
        return create_from_template(store, template_id, fields, created_by, now, user_store=user_store)
    return create_freeform(store, fields, created_by, now, user_store=user_store)


def handler(event, context):
    log_event(event)

    admin_id = get_user_sub(event)
    if not admin_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can create tasks'))

    try:
        task = create_task(get_task_store(), parse_body(event), admin_id, user_store=get_user_store())
        return format_response(201, task)

    except TaskError as e:
        logger.info(f"Create task rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating task: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
