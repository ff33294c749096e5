"""
Analytics Summary Handler.
GET /analytics/summary

Every figure is recomputed from the task records on each call; nothing is
cached, so the summary can never drift from the tasks table.
"""
from collections import Counter
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from shared.auth import get_user_sub, is_admin
from shared.compensation import estimated_value, is_payable, round2
from shared.config import config
from shared.errors import TaskError, ForbiddenError
from shared.logging import logger, log_event
from shared.models import TaskStatus, TaskCategory, Priority, PaymentStatus
from shared.task_store import get_task_store, get_user_store
from shared.utils import format_response, error_response, parse_timestamp, to_decimal, utc_now

# REJECTED never rests in the table, so it is not reported
REPORTED_STATUSES = tuple(s for s in TaskStatus.ALL if s != TaskStatus.REJECTED)


def _histogram(tasks, field, keys) -> Dict[str, int]:
    counts = Counter(task.get(field) for task in tasks)
    return {key: counts.get(key, 0) for key in keys}


def _earnings(task) -> Decimal:
    return to_decimal(task.get('totalEarnings')) or Decimal('0')


def _since(tasks, field, cutoff) -> int:
    count = 0
    for task in tasks:
        moment = parse_timestamp(task.get(field))
        if moment is not None and moment >= cutoff:
            count += 1
    return count


def user_stats(tasks: List[Dict[str, Any]], users: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    """Per-user assigned/completed counts, completion rate and payable earnings."""
    stats = {}
    for task in tasks:
        for user_id in task.get('assignedTo', []):
            entry = stats.setdefault(user_id, {
                'userId': user_id,
                'assignedTasks': 0,
                'completedTasks': 0,
                'earnings': Decimal('0'),
            })
            entry['assignedTasks'] += 1
            if task.get('status') == TaskStatus.APPROVED:
                entry['completedTasks'] += 1
                if is_payable(task):
                    entry['earnings'] += _earnings(task)

    names = {u['userId']: u.get('name') for u in users or []}
    result = []
    for user_id in sorted(stats):
        entry = stats[user_id]
        entry['earnings'] = round2(entry['earnings'])
        entry['completionRate'] = round(entry['completedTasks'] / entry['assignedTasks'], 4)
        if names.get(user_id):
            entry['name'] = names[user_id]
        result.append(entry)
    return result


def summarize(tasks: List[Dict[str, Any]], users: Optional[List[Dict[str, Any]]] = None, now=None) -> Dict[str, Any]:
    """
    Aggregate the task table into the admin dashboard figures.

    Args:
        tasks: Every task record
        users: User records, used for names and active/total counts
        now: Reference time for the recent-activity window

    Returns:
        Summary dict (histograms, money totals, per-user stats, recent activity)
    """
    now = now or utc_now()
    approved = [t for t in tasks if t.get('status') == TaskStatus.APPROVED]
    payable = [t for t in approved if is_payable(t)]

    total_value = round2(sum((estimated_value(t) for t in tasks), Decimal('0')))
    cutoff = now - timedelta(days=config.RECENT_ACTIVITY_DAYS)

    summary = {
        'totalTasks': len(tasks),
        'byStatus': _histogram(tasks, 'status', REPORTED_STATUSES),
        'byCategory': _histogram(tasks, 'category', TaskCategory.ALL),
        'byPriority': _histogram(tasks, 'priority', Priority.ALL),
        'totalValue': total_value,
        'averageTaskValue': round2(total_value / len(tasks)) if tasks else Decimal('0.00'),
        'realizedValue': round2(sum((_earnings(t) for t in approved), Decimal('0'))),
        'payableEarnings': round2(sum((_earnings(t) for t in payable), Decimal('0'))),
        'pendingEarnings': round2(sum(
            (_earnings(t) for t in payable if t.get('paymentStatus') == PaymentStatus.PENDING),
            Decimal('0')
        )),
        'paidEarnings': round2(sum(
            (_earnings(t) for t in payable if t.get('paymentStatus') == PaymentStatus.PAID),
            Decimal('0')
        )),
        'reviewQueue': sum(1 for t in tasks if t.get('status') == TaskStatus.UNDER_REVIEW),
        'recentActivity': {
            'days': config.RECENT_ACTIVITY_DAYS,
            'created': _since(tasks, 'createdAt', cutoff),
            'completed': _since(approved, 'completedAt', cutoff),
        },
        'users': user_stats(tasks, users),
    }

    if users is not None:
        summary['totalUsers'] = len(users)
        summary['activeUsers'] = sum(1 for u in users if u.get('isActive', True))

    return summary


def handler(event, context):
    log_event(event)

    if not get_user_sub(event):
        return format_response(401, {'error': 'Unauthorized'})
    if not is_admin(event):
        return error_response(ForbiddenError('Only admins can view analytics'))

    try:
        tasks = get_task_store().scan_all()
        users = get_user_store().list_users()
        return format_response(200, summarize(tasks, users))

    except TaskError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error building analytics summary: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
