"""
Field-level validation for task authoring.
Every check returns error strings of the form "<field>: <message>" so callers can
collect all problems in one pass and raise a single ValidationError.
"""
import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .models import TaskCategory, TEXT_LIMITS, MAX_ESTIMATED_HOURS
from .utils import to_decimal, parse_timestamp

URL_PATTERN = re.compile(r'^https?://[^\s/$.?#][^\s]*$', re.IGNORECASE)

MIN_LABELS = 2
AUDIO_MINUTES = (1, 180)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _positive(value, values):
    number = to_decimal(value)
    if number is not None and number <= 0:
        return 'must be greater than 0'
    return None


def _url(value, values):
    if not isinstance(value, str) or not URL_PATTERN.match(value.strip()):
        return 'must be an http(s) URL'
    return None


def _labels(value, values):
    labels = [label for label in value if not is_blank(label)] if isinstance(value, list) else []
    if len(labels) < MIN_LABELS:
        return f'at least {MIN_LABELS} labels required'
    return None


def _audio_minutes(value, values):
    minutes = to_decimal(value)
    low, high = AUDIO_MINUTES
    if minutes is None or minutes < low or minutes > high:
        return f'must be between {low} and {high} minutes'
    return None


def _distinct_language(value, values):
    if value == values.get('sourceLanguage'):
        return 'must be different from sourceLanguage'
    return None


VALIDATORS: Dict[str, Callable[[Any, Dict[str, Any]], Optional[str]]] = {
    'positive': _positive,
    'url': _url,
    'labels': _labels,
    'audio_minutes': _audio_minutes,
    'distinct_language': _distinct_language,
}


def _check_kind(field: Dict[str, Any], value: Any) -> Optional[str]:
    kind = field['kind']
    if kind in ('text', 'textarea', 'url') and not isinstance(value, str):
        return 'must be a string'
    if kind == 'number' and to_decimal(value) is None:
        return 'must be a number'
    if kind == 'list' and not isinstance(value, list):
        return 'must be a list'
    if kind == 'tags':
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return 'must be a list of strings'
    if kind == 'select' and field.get('options') and value not in field['options']:
        return f"must be one of {', '.join(field['options'])}"
    if kind == 'date' and parse_timestamp(value) is None:
        return 'must be an ISO-8601 date or timestamp'
    return None


def check_field(field: Dict[str, Any], values: Dict[str, Any], enforce_required: bool = True) -> Optional[str]:
    """
    Validate one template field against the draft values.

    Returns:
        "<field>: <message>" or None when the value is acceptable
    """
    field_id = field['id']
    value = values.get(field_id)

    if is_blank(value):
        if enforce_required and field.get('required'):
            return f'{field_id}: is required'
        return None

    error = _check_kind(field, value)
    if error is None and field_id in TEXT_LIMITS:
        low, high = TEXT_LIMITS[field_id]
        length = len(value.strip())
        if length < low:
            error = f'must be at least {low} characters'
        elif length > high:
            error = f'must be at most {high} characters'
    if error is None and field.get('validator'):
        error = VALIDATORS[field['validator']](value, values)

    return f'{field_id}: {error}' if error else None


def check_content_rule(category: str, values: Dict[str, Any]) -> List[str]:
    """Category-specific content a task cannot be worked without."""
    has_inputs = not is_blank(values.get('inputs'))

    if category == TaskCategory.DATA_ANNOTATION:
        if not (has_inputs or not is_blank(values.get('imageUrl')) or not is_blank(values.get('datasetUrl'))):
            return ['inputs: DATA_ANNOTATION tasks need imageUrl, datasetUrl or at least one input']
    elif category == TaskCategory.TRANSCRIPTION:
        if not (has_inputs or not is_blank(values.get('audioUrl'))):
            return ['inputs: TRANSCRIPTION tasks need audioUrl or at least one input']
    elif category == TaskCategory.TRANSLATION:
        if not (has_inputs or not is_blank(values.get('contentToTranslate'))):
            return ['inputs: TRANSLATION tasks need contentToTranslate or at least one input']
    return []


def validate_task(
    values: Dict[str, Any],
    fields: List[Dict[str, Any]],
    allowed: Iterable[str],
    now: datetime,
    enforce_required: bool = True
) -> List[str]:
    """
    Validate a complete draft task.

    Args:
        values: Flat draft values (core fields and category fields together)
        fields: Template fields to check the values against
        allowed: Every key the draft may contain
        now: Creation time, the earliest acceptable deadline
        enforce_required: Apply the template's required flags

    Returns:
        All error messages found, empty when the draft is valid
    """
    errors = []

    unknown = sorted(key for key in values if key not in allowed)
    errors.extend(f'{key}: unknown field' for key in unknown)

    category = values.get('category')
    if category not in TaskCategory.ALL:
        errors.append(f"category: must be one of {', '.join(TaskCategory.ALL)}")

    for field in fields:
        error = check_field(field, values, enforce_required)
        if error:
            errors.append(error)

    # Core fields are required whether or not a template asked for them
    checked = {field['id'] for field in fields if field.get('required') and enforce_required}
    for field_id in ('title', 'description', 'instructions', 'estimatedHours', 'hourlyRate'):
        if field_id not in checked and is_blank(values.get(field_id)):
            errors.append(f'{field_id}: is required')

    hours = to_decimal(values.get('estimatedHours'))
    if hours is not None and hours > MAX_ESTIMATED_HOURS:
        errors.append(f'estimatedHours: must be at most {MAX_ESTIMATED_HOURS}')

    deadline = parse_timestamp(values.get('deadline'))
    if deadline is not None and deadline < now:
        errors.append('deadline: must not be before the creation time')

    assigned = values.get('assignedTo')
    if assigned is not None and not isinstance(assigned, (str, list)):
        errors.append('assignedTo: must be a user id or a list of user ids')
    elif isinstance(assigned, list) and not all(isinstance(u, str) for u in assigned):
        errors.append('assignedTo: must be a user id or a list of user ids')

    qc = values.get('isQualityControl')
    if qc is not None and not isinstance(qc, bool):
        errors.append('isQualityControl: must be true or false')

    if category in TaskCategory.ALL:
        errors.extend(check_content_rule(category, values))

    return errors
