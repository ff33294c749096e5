"""
Tests for compensation arithmetic and the analytics rollups.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from handlers.analytics.get_summary import summarize, user_stats
from handlers.analytics.get_worker_dashboard import summarize_worker
from handlers.payments.settle_payment import settle_payment
from handlers.reviews.review_task import review
from handlers.submissions.submit_work import submit
from shared.compensation import compute_earnings, estimated_value, is_payable
from shared.models import TaskStatus, TaskCategory
from shared.utils import isoformat


class TestComputeEarnings:
    """Tests for earnings arithmetic."""

    def test_rate_times_hours(self):
        """Earnings are rate times hours."""
        assert compute_earnings(15, Decimal('2.5')) == Decimal('37.50')

    def test_rounds_half_up_to_cents(self):
        """Results round half up to the cent."""
        assert compute_earnings(Decimal('10.005'), 1) == Decimal('10.01')
        assert compute_earnings(Decimal('0.333'), 3) == Decimal('1.00')

    def test_floats_go_through_their_decimal_text(self):
        """Floats are converted through their text, not their binary value."""
        assert compute_earnings(18.1, 3) == Decimal('54.30')

    def test_missing_values(self):
        """Missing or negative inputs raise ValueError."""
        with pytest.raises(ValueError):
            compute_earnings(None, 2)
        with pytest.raises(ValueError):
            compute_earnings(15, -1)

    def test_estimated_value_and_payable(self):
        """QC tasks have a value but are not payable."""
        task = {'hourlyRate': Decimal('25'), 'estimatedHours': Decimal('3'), 'isQualityControl': True}
        assert estimated_value(task) == Decimal('75.00')
        assert not is_payable(task)
        assert is_payable({})


def _run(store, make_task, now, worker, hours, rating=None, qc=False, pay=False, **overrides):
    task = make_task(assignedTo=[worker], isQualityControl=qc, **overrides)
    submit(store, task['taskId'], worker, deliverables=['x'], actual_hours=hours, now=now)
    if rating is not None:
        task = review(store, task['taskId'], 'admin-1', 'approve', rating=rating, now=now)
    if pay:
        task = settle_payment(store, task['taskId'], 'admin-1', now=now)
    return task


class TestSummary:
    """Tests for the admin summary."""

    def test_empty_table(self, now):
        """An empty table gives zeroed rollups."""
        summary = summarize([], [], now)
        assert summary['totalTasks'] == 0
        assert summary['totalValue'] == 0
        assert summary['averageTaskValue'] == 0
        assert summary['users'] == []
        assert summary['byStatus'][TaskStatus.AVAILABLE] == 0
        assert TaskStatus.REJECTED not in summary['byStatus']

    def test_rollups(self, store, user_store, make_task, now):
        """Histograms, values and per-user stats over a mixed table."""
        make_task()                                                   # available, value 30
        make_task(assignedTo=['U2'], priority='critical')             # assigned, value 30
        _run(store, make_task, now, 'U1', 2, rating=5, pay=True)      # approved 30.00, paid
        _run(store, make_task, now, 'U1', 1, rating=4)                # approved 15.00, pending
        _run(store, make_task, now, 'U2', 3, rating=3, qc=True)       # approved 45.00, QC
        _run(store, make_task, now, 'U2', 1)                          # under review

        summary = summarize(store.scan_all(), user_store.list_users(), now)

        assert summary['totalTasks'] == 6
        assert summary['byStatus'][TaskStatus.APPROVED] == 3
        assert summary['byStatus'][TaskStatus.UNDER_REVIEW] == 1
        assert summary['byCategory'][TaskCategory.DATA_ANNOTATION] == 6
        assert summary['byPriority']['critical'] == 1
        assert summary['totalValue'] == Decimal('180.00')
        assert summary['averageTaskValue'] == Decimal('30.00')
        assert summary['realizedValue'] == Decimal('90.00')
        assert summary['payableEarnings'] == Decimal('45.00')
        assert summary['paidEarnings'] == Decimal('30.00')
        assert summary['pendingEarnings'] == Decimal('15.00')
        assert summary['reviewQueue'] == 1
        assert summary['recentActivity'] == {'days': 7, 'created': 6, 'completed': 3}
        assert summary['totalUsers'] == 3
        assert summary['activeUsers'] == 3

        by_user = {u['userId']: u for u in summary['users']}
        assert by_user['U1']['completionRate'] == 1.0
        assert by_user['U1']['earnings'] == Decimal('45.00')
        assert by_user['U2']['assignedTasks'] == 3
        assert by_user['U2']['completedTasks'] == 1
        assert by_user['U2']['completionRate'] == round(1 / 3, 4)
        assert by_user['U2']['earnings'] == 0
        assert by_user['U1']['name'] == 'U1'

    def test_recent_window(self, store, make_task, now):
        """Tasks older than the window are not recent."""
        make_task()
        later = now + timedelta(days=8)
        summary = summarize(store.scan_all(), now=later)
        assert summary['recentActivity']['created'] == 0
        assert 'totalUsers' not in summary

    def test_user_stats_without_users(self):
        """Per-user stats fall back to assignee ids."""
        tasks = [
            {'assignedTo': ['A'], 'status': TaskStatus.APPROVED, 'totalEarnings': Decimal('10')},
            {'assignedTo': ['A', 'B'], 'status': TaskStatus.ASSIGNED, 'totalEarnings': Decimal('0')},
        ]
        stats = user_stats(tasks)
        assert [s['userId'] for s in stats] == ['A', 'B']
        assert stats[0]['completionRate'] == 0.5
        assert stats[1]['completionRate'] == 0


class TestWorkerDashboard:
    """Tests for the worker dashboard."""

    def test_worker_view(self, store, make_task, now):
        """Counts, earnings and rating for one worker."""
        _run(store, make_task, now, 'U1', 2, rating=5, pay=True)
        _run(store, make_task, now, 'U1', 1, rating=3)
        _run(store, make_task, now, 'U1', 1, rating=4, qc=True)
        make_task(assignedTo=['U1'])
        make_task(assignedTo=['U2'])

        dashboard = summarize_worker(store.query_by_assignee('U1'), 'U1')

        assert dashboard['totalTasks'] == 4
        assert dashboard['byStatus'][TaskStatus.APPROVED] == 3
        assert dashboard['activeTasks'] == 1
        assert dashboard['earningsPaid'] == Decimal('30.00')
        assert dashboard['earningsPending'] == Decimal('15.00')
        assert dashboard['totalEarnings'] == Decimal('45.00')
        assert dashboard['averageRating'] == 4.0
        assert len(dashboard['recentTasks']) == 4

    def test_recent_tasks_capped_and_newest_first(self, store, make_task, now):
        """Only the five most recently updated tasks are listed."""
        from handlers.tasks.assign_task import assign
        for hours in range(7):
            task = make_task()
            assign(store, task['taskId'], ['U1'], now=now + timedelta(hours=hours))

        recent = summarize_worker(store.scan_all(), 'U1')['recentTasks']
        assert len(recent) == 5
        assert recent[0]['updatedAt'] == isoformat(now + timedelta(hours=6))

    def test_no_tasks(self):
        """A worker with no tasks has no average rating."""
        dashboard = summarize_worker([], 'U1')
        assert dashboard['totalTasks'] == 0
        assert dashboard['averageRating'] is None
