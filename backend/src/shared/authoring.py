"""
Task authoring.

All creation paths (template, freeform, bulk) funnel through build_task(),
which validates the whole draft at once and only then produces a record.
Nothing is written unless the draft is valid.
"""
import copy
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from .config import config
from .errors import TaskError, ValidationError, NotFoundError, PartialFailureError
from .logging import logger
from .models import (
    TaskStatus, TaskCategory, Priority, DifficultyLevel, PaymentStatus,
    AUTHORING_FIELDS, LIST_FIELDS,
)
from .templates import get_template, common_fields
from .utils import to_decimal, parse_timestamp, isoformat, utc_now
from .validation import validate_task


def normalize_assignees(assigned: Any) -> List[str]:
    """Accept one id or a list of ids; drop blanks and duplicates, keep order."""
    if assigned is None:
        return []
    if isinstance(assigned, str):
        assigned = [assigned]
    seen = []
    for user_id in assigned:
        user_id = str(user_id).strip()
        if user_id and user_id not in seen:
            seen.append(user_id)
    return seen


def require_users(user_store, user_ids: List[str]) -> None:
    """
    Raises:
        NotFoundError: some of user_ids have no user record
    """
    if user_store is None or not user_ids:
        return
    missing = user_store.missing(user_ids)
    if missing:
        raise NotFoundError('User', ', '.join(missing))


def _dynamo_value(value):
    """DynamoDB rejects floats; store them as Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [_dynamo_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _dynamo_value(v) for k, v in value.items()}
    return value


def build_task(
    values: Dict[str, Any],
    template: Optional[Dict[str, Any]],
    created_by: str,
    now: datetime,
    enforce_required: bool = True
) -> Dict[str, Any]:
    """
    Validate a flat draft and turn it into a task record.

    Args:
        values: Core fields and category fields together
        template: Template for the draft's category, or None when the category is unknown
        created_by: Principal authoring the task
        now: Creation time
        enforce_required: Apply the template's required flags

    Raises:
        ValidationError: with every problem found in the draft
    """
    fields = template['fields'] if template else common_fields()
    allowed = set(AUTHORING_FIELDS) | {field['id'] for field in fields}

    errors = validate_task(values, fields, allowed, now, enforce_required)
    if errors:
        raise ValidationError(errors)

    category = values['category']
    assignees = normalize_assignees(values.get('assignedTo'))
    deadline = parse_timestamp(values.get('deadline')) or now + timedelta(days=config.DEFAULT_DEADLINE_DAYS)
    timestamp = isoformat(now)

    task = {
        'taskId': str(uuid.uuid4()),
        'category': category,
        'type': (values.get('type') or category.lower()).strip(),
        'priority': values.get('priority') or Priority.MEDIUM,
        'difficultyLevel': values.get('difficultyLevel') or DifficultyLevel.INTERMEDIATE,
        'title': values['title'].strip(),
        'description': values['description'].strip(),
        'instructions': values['instructions'].strip(),
        'estimatedHours': to_decimal(values['estimatedHours']),
        'hourlyRate': to_decimal(values['hourlyRate']),
        'deadline': isoformat(deadline),
        'totalEarnings': Decimal('0'),
        'assignedTo': assignees,
        'status': TaskStatus.ASSIGNED if assignees else TaskStatus.AVAILABLE,
        'isQualityControl': bool(values.get('isQualityControl', False)),
        'paymentStatus': PaymentStatus.NONE,
        'progress': 0,
        'revisionRequested': False,
        'reviewHistory': [],
        'createdBy': created_by,
        'createdAt': timestamp,
        'updatedAt': timestamp,
    }
    if assignees:
        task['assignedAt'] = timestamp

    for field_name in LIST_FIELDS:
        if field_name != 'assignedTo':
            task[field_name] = _dynamo_value(list(values.get(field_name) or []))

    for field_name in ('guidelines', 'expectedOutput', 'domainExpertise'):
        if values.get(field_name):
            task[field_name] = values[field_name]

    task['taskData'] = _dynamo_value({
        key: value for key, value in values.items()
        if key not in AUTHORING_FIELDS and value is not None
    })
    return task


def merge_template(template: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Template defaults overlaid with caller values. None in overrides means "use the default"."""
    values = copy.deepcopy(template['defaultValues'])
    values['category'] = template['id']
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    return values


def create_from_template(
    store,
    template_id: str,
    overrides: Dict[str, Any],
    created_by: str,
    now: Optional[datetime] = None,
    user_store=None
) -> Dict[str, Any]:
    """
    Create one task seeded from a category template.

    Raises:
        NotFoundError: no such template, or unknown assignees when user_store is given
        ValidationError: merged draft is invalid, nothing written
    """
    now = now or utc_now()
    template = get_template(template_id)
    values = merge_template(template, overrides)
    if values['category'] != template['id']:
        raise ValidationError([f"category: must be {template['id']} for this template"])

    task = build_task(values, template, created_by, now)
    require_users(user_store, task['assignedTo'])
    return store.create(task)


def create_freeform(
    store,
    fields: Dict[str, Any],
    created_by: str,
    now: Optional[datetime] = None,
    user_store=None
) -> Dict[str, Any]:
    """Create one task from caller-supplied fields only, no template defaults."""
    now = now or utc_now()
    values = {k: v for k, v in (fields or {}).items() if v is not None}
    category = values.get('category')
    template = get_template(category) if category in TaskCategory.ALL else None

    task = build_task(values, template, created_by, now, enforce_required=False)
    require_users(user_store, task['assignedTo'])
    return store.create(task)


def bulk_drafts(category: str, count: int, difficulty: str) -> List[Dict[str, Any]]:
    """Draft values for count tasks cycled from the category template's examples."""
    template = get_template(category)
    examples = template['examples']
    drafts = []
    for index in range(count):
        example = examples[index % len(examples)]
        overrides = copy.deepcopy(example.get('sampleData', {}))
        overrides.update({
            'title': f"{example['title']} #{index + 1}",
            'description': example['description'],
            'inputs': copy.deepcopy(example['inputs']),
            'difficultyLevel': difficulty,
        })
        drafts.append(merge_template(template, overrides))
    return drafts


def create_bulk(
    store,
    category: str,
    count: Any,
    difficulty: str,
    created_by: str,
    now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """
    Create count tasks of one category and difficulty sharing a batchId.

    Every task is validated before the first write. Writes are independent,
    so a failure part way leaves the earlier tasks in place.

    Raises:
        ValidationError: bad category, difficulty or count; nothing written
        PartialFailureError: some writes failed; carries the created tasks
    """
    now = now or utc_now()
    errors = []
    if category not in TaskCategory.ALL:
        errors.append(f"category: must be one of {', '.join(TaskCategory.ALL)}")
    if difficulty not in DifficultyLevel.ALL:
        errors.append(f"difficulty: must be one of {', '.join(DifficultyLevel.ALL)}")
    if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= config.MAX_BULK_TASKS:
        errors.append(f'count: must be a whole number between 1 and {config.MAX_BULK_TASKS}')
    if errors:
        raise ValidationError(errors)

    template = get_template(category)
    batch_id = str(uuid.uuid4())
    tasks = []
    for values in bulk_drafts(category, count, difficulty):
        task = build_task(values, template, created_by, now)
        task['batchId'] = batch_id
        tasks.append(task)

    created = []
    failures = []
    for task in tasks:
        try:
            created.append(store.create(task))
        except (ClientError, TaskError) as e:
            logger.error(f"Bulk create failed for task {task['taskId']} in batch {batch_id}: {e}")
            failures.append({'taskId': task['taskId'], 'title': task['title'], 'error': str(e)})

    if failures:
        raise PartialFailureError(created, failures)

    logger.info(f"Created {len(created)} {category} tasks in batch {batch_id}")
    return created
