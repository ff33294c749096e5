"""
Templates Handler.
GET /templates
GET /templates/{templateId}
POST /templates/{templateId}/validate  {"section": "basic", "values": {...}}

The validate route checks one wizard section of a draft against the
template, so the authoring form can flag errors step by step.
"""
from shared.auth import get_user_sub
from shared.errors import TaskError, ValidationError
from shared.logging import logger, log_event
from shared.templates import list_templates, get_template, validate_section
from shared.utils import format_response, error_response, get_path_param, parse_body


def check_section(template_id: str, section, values) -> dict:
    """
    Raises:
        NotFoundError: no such template
        ValidationError: the section has field errors
    """
    template = get_template(template_id)
    if not isinstance(values, dict):
        raise ValidationError(['values: must be an object'])

    errors = validate_section(template, section, values)
    if errors:
        raise ValidationError(errors, message=f'Section {section} is incomplete')
    return {'templateId': template_id, 'section': section, 'valid': True}


def _is_validate_request(event) -> bool:
    resource = event.get('resource') or event.get('path') or ''
    return event.get('httpMethod') == 'POST' or resource.endswith('/validate')


def handler(event, context):
    log_event(event)

    if not get_user_sub(event):
        return format_response(401, {'error': 'Unauthorized'})

    template_id = get_path_param(event, 'templateId')

    try:
        if template_id and _is_validate_request(event):
            body = parse_body(event)
            return format_response(200, check_section(template_id, body.get('section'), body.get('values', {})))
        if template_id:
            return format_response(200, get_template(template_id))
        return format_response(200, {'templates': list_templates()})

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error loading templates: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
