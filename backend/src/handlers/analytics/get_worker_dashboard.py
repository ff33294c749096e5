"""
Worker Dashboard Handler.
GET /analytics/me
"""
from decimal import Decimal
from typing import Any, Dict, List

from shared.auth import get_user_sub
from shared.compensation import is_payable, round2
from shared.errors import TaskError
from shared.logging import logger, log_event
from shared.models import TaskStatus, PaymentStatus
from shared.task_store import get_task_store
from shared.utils import format_response, error_response, to_decimal

RECENT_TASKS = 5


def summarize_worker(tasks: List[Dict[str, Any]], worker_id: str) -> Dict[str, Any]:
    """Counts per status, earnings split by payment state, and the latest tasks."""
    mine = [t for t in tasks if worker_id in t.get('assignedTo', [])]
    counts = {status: 0 for status in TaskStatus.ALL if status != TaskStatus.REJECTED}
    paid = pending = Decimal('0')
    ratings = []

    for task in mine:
        counts[task['status']] = counts.get(task['status'], 0) + 1
        if task['status'] != TaskStatus.APPROVED:
            continue
        ratings.append(int(task['rating']))
        if not is_payable(task):
            continue
        earnings = to_decimal(task.get('totalEarnings')) or Decimal('0')
        if task.get('paymentStatus') == PaymentStatus.PAID:
            paid += earnings
        else:
            pending += earnings

    recent = sorted(mine, key=lambda t: t.get('updatedAt') or '', reverse=True)[:RECENT_TASKS]

    return {
        'workerId': worker_id,
        'totalTasks': len(mine),
        'byStatus': counts,
        'activeTasks': counts[TaskStatus.ASSIGNED] + counts[TaskStatus.IN_PROGRESS],
        'earningsPaid': round2(paid),
        'earningsPending': round2(pending),
        'totalEarnings': round2(paid + pending),
        'averageRating': round(sum(ratings) / len(ratings), 2) if ratings else None,
        'recentTasks': [
            {
                'taskId': t['taskId'],
                'title': t.get('title'),
                'status': t['status'],
                'updatedAt': t.get('updatedAt'),
                'totalEarnings': t.get('totalEarnings', Decimal('0')),
            }
            for t in recent
        ],
    }


def handler(event, context):
    log_event(event)

    worker_id = get_user_sub(event)
    if not worker_id:
        return format_response(401, {'error': 'Unauthorized'})

    try:
        tasks = get_task_store().query_by_assignee(worker_id)
        return format_response(200, summarize_worker(tasks, worker_id))

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error building dashboard for {worker_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
