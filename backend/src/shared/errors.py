"""
Error taxonomy for task operations.
Every error carries a kind and an HTTP status so handlers can surface it unchanged.
"""
from typing import Any, Dict, List, Optional


class TaskError(Exception):
    """Base exception for the task engine."""
    kind = 'TaskError'
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {'error': self.kind, 'message': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(TaskError):
    """Malformed or incomplete input. Never mutates state."""
    kind = 'ValidationError'
    status_code = 400

    def __init__(self, errors: List[str], message: str = 'Validation failed'):
        super().__init__(message, {'errors': list(errors)})
        self.errors = list(errors)


class NotFoundError(TaskError):
    """Referenced task, template or user does not exist."""
    kind = 'NotFound'
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' was not found",
                         {'resource': resource, 'id': resource_id})
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(TaskError):
    """Actor lacks the capability for the requested transition."""
    kind = 'Forbidden'
    status_code = 403


class InvalidStateError(TaskError):
    """The task's current status does not satisfy the operation's guard.

    Also raised when a conditional write loses a concurrent race; callers
    should re-fetch the task and decide whether to retry.
    """
    kind = 'InvalidState'
    status_code = 409

    def __init__(self, message: str, current_status: Optional[str] = None):
        details = {'currentStatus': current_status} if current_status else None
        super().__init__(message, details)
        self.current_status = current_status


class PartialFailureError(TaskError):
    """Bulk creation where only some tasks were written."""
    kind = 'PartialFailure'
    status_code = 207

    def __init__(self, created: List[Dict[str, Any]], failures: List[Dict[str, Any]]):
        super().__init__(
            f"Created {len(created)} tasks, {len(failures)} failed",
            {'failures': failures}
        )
        self.created = created
        self.failures = failures

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['tasks'] = self.created
        return body
