"""
Principal extraction from the Cognito authorizer claims on API Gateway events.

Handlers resolve the acting user here and pass the id (and admin flag) into
the task operations explicitly; nothing below the handler reads the event.
"""
from typing import List, Optional

ADMIN_GROUP = 'admin'


def _claims(event: dict) -> dict:
    try:
        return event['requestContext']['authorizer']['claims'] or {}
    except (KeyError, TypeError):
        return {}


def get_user_sub(event: dict) -> Optional[str]:
    """
    Return the caller's Cognito sub.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        The sub, or None when the request carries no authenticated principal
    """
    return _claims(event).get('sub') or None


def get_user_groups(event: dict) -> List[str]:
    # REST authorizers send a comma separated string, HTTP APIs send a list
    groups = _claims(event).get('cognito:groups') or []
    if isinstance(groups, str):
        groups = groups.strip('[]').replace(' ', ',').split(',')
    return [g for g in groups if g]


def is_admin(event: dict) -> bool:
    """Admins author, assign, review and settle tasks."""
    return ADMIN_GROUP in get_user_groups(event)
