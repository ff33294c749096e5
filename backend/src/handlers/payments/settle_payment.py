"""
Settle Payment Handler.
POST /tasks/{taskId}/payment

Marks the earnings of an approved task as paid out. Quality-control tasks are
never payable.
"""
from shared.auth import get_user_sub, is_admin
from shared.errors import TaskError, ForbiddenError, InvalidStateError
from shared.logging import logger, log_event
from shared.models import TaskStatus, PaymentStatus
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, get_path_param, utc_now, isoformat


def settle_payment(store, task_id: str, paid_by: str, now=None) -> dict:
    """
    APPROVED + PENDING -> PAID.

    Raises:
        NotFoundError: unknown task
        InvalidStateError: task is not approved, not payable, already paid,
            or another settlement won the race
    """
    timestamp = isoformat(now or utc_now())
    task = store.require(task_id)

    if task['status'] != TaskStatus.APPROVED:
        raise InvalidStateError(
            f"Task {task_id} is {task['status']}; only approved tasks can be paid",
            current_status=task['status']
        )
    payment_status = task.get('paymentStatus', PaymentStatus.NONE)
    if payment_status != PaymentStatus.PENDING:
        raise InvalidStateError(
            f"Task {task_id} payment is {payment_status}, nothing to settle",
            current_status=task['status']
        )

    paid = dict(task)
    paid['paymentStatus'] = PaymentStatus.PAID
    paid['paidAt'] = timestamp
    paid['paidBy'] = paid_by
    paid['updatedAt'] = timestamp

    saved = store.save(paid, expected_status=TaskStatus.APPROVED)
    logger.info(f"Paid {task['totalEarnings']} for task {task_id} to {task.get('assignedTo')}")
    return saved


def handler(event, context):
    log_event(event)

    admin_id = get_user_sub(event)
    if not admin_id:
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can settle payments'))

    task_id = get_path_param(event, 'taskId')

    try:
        return format_response(200, settle_payment(get_task_store(), task_id, admin_id))

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error settling payment for task {task_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
