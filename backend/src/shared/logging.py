"""
Logging for the Lambda handlers: one named logger plus a request summary helper.
"""
import json
import logging

from .config import config

logger = logging.getLogger('gigtasks')
logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)


def _summary(event: dict) -> dict:
    if 'Records' in event:
        return {'records': len(event.get('Records') or [])}

    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims') or {}
    return {
        'method': event.get('httpMethod'),
        'resource': event.get('resource') or event.get('path'),
        'pathParameters': event.get('pathParameters'),
        'query': event.get('queryStringParameters'),
        'sub': claims.get('sub'),
    }


def log_event(event: dict) -> None:
    """Log what was invoked and by whom. Request bodies and headers are never logged."""
    try:
        logger.info(f"Lambda event: {json.dumps(_summary(event), default=str)}")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not log event: {e}")
