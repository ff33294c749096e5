"""
List Tasks Handler.
GET /tasks?status=&category=&search=&assignee=&sortBy=&order=&limit=&offset=

Admins list every task; workers only see tasks assigned to them.
The most selective index is queried, the remaining filters run in memory.
"""
from shared.auth import get_user_sub, is_admin
from shared.errors import TaskError, ValidationError
from shared.logging import logger, log_event
from shared.models import TaskStatus, TaskCategory, Priority
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, get_query_param, normalize_text, to_decimal

SORT_FIELDS = ('createdAt', 'updatedAt', 'submittedAt', 'deadline', 'hourlyRate', 'priority', 'title')
PRIORITY_RANK = {priority: rank for rank, priority in enumerate(Priority.ALL)}
MAX_PAGE_SIZE = 100


def _matches(task: dict, term: str) -> bool:
    haystack = ' '.join(str(task.get(field, '')) for field in ('title', 'description', 'type'))
    return term in normalize_text(haystack)


def _sort_key(sort_by: str):
    if sort_by == 'priority':
        return lambda t: PRIORITY_RANK.get(t.get('priority'), -1)
    if sort_by == 'hourlyRate':
        return lambda t: to_decimal(t.get('hourlyRate')) or 0
    return lambda t: str(t.get(sort_by) or '')


def list_tasks(
    store,
    status: str = None,
    category: str = None,
    search: str = None,
    assignee: str = None,
    sort_by: str = 'createdAt',
    descending: bool = True,
    limit: int = 50,
    offset: int = 0
) -> dict:
    """
    Filter, sort and page tasks.

    Returns:
        {'tasks': [...], 'total': n, 'limit': limit, 'offset': offset}
    """
    errors = []
    if status and status not in TaskStatus.ALL:
        errors.append(f"status: must be one of {', '.join(TaskStatus.ALL)}")
    if category and category not in TaskCategory.ALL:
        errors.append(f"category: must be one of {', '.join(TaskCategory.ALL)}")
    if sort_by not in SORT_FIELDS:
        errors.append(f"sortBy: must be one of {', '.join(SORT_FIELDS)}")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        errors.append(f'limit: must be between 1 and {MAX_PAGE_SIZE}')
    if offset < 0:
        errors.append('offset: must not be negative')
    if errors:
        raise ValidationError(errors)

    if status:
        tasks = store.query_by_status(status)
    elif category:
        tasks = store.query_by_category(category)
    elif assignee:
        tasks = store.query_by_assignee(assignee)
    else:
        tasks = store.scan_all()

    if category:
        tasks = [t for t in tasks if t.get('category') == category]
    if assignee:
        tasks = [t for t in tasks if assignee in t.get('assignedTo', [])]
    term = normalize_text(search)
    if term:
        tasks = [t for t in tasks if _matches(t, term)]

    tasks = sorted(tasks, key=_sort_key(sort_by), reverse=descending)
    return {
        'tasks': tasks[offset:offset + limit],
        'total': len(tasks),
        'limit': limit,
        'offset': offset
    }


def _int_param(event, name, default):
    value = get_query_param(event, name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError([f'{name}: must be a whole number'])


def handler(event, context):
    log_event(event)

    user_id = get_user_sub(event)
    if not user_id:
        return format_response(401, {'error': 'Unauthorized'})

    assignee = get_query_param(event, 'assignee')
    if not is_admin(event):
        assignee = user_id

    try:
        result = list_tasks(
            get_task_store(),
            status=get_query_param(event, 'status'),
            category=get_query_param(event, 'category'),
            search=get_query_param(event, 'search'),
            assignee=assignee,
            sort_by=get_query_param(event, 'sortBy', 'createdAt'),
            descending=get_query_param(event, 'order', 'desc') != 'asc',
            limit=_int_param(event, 'limit', 50),
            offset=_int_param(event, 'offset', 0)
        )
        return format_response(200, result)

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing tasks: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
