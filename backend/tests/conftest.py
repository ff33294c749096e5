"""
Shared fixtures: in-memory stand-ins for the DynamoDB-backed stores.
They keep the same contract as shared.task_store (conditional writes,
InvalidStateError on a lost race, invariant checks before every write).
"""
import copy
import json
import os
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from botocore.exceptions import ClientError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.errors import NotFoundError, InvalidStateError  # noqa: E402
from shared.task_store import TaskStore  # noqa: E402


class InMemoryTaskStore:
    def __init__(self):
        self.items = {}
        self.writes = 0
        self.fail_on_create = set()  # indexes of create() calls that should fail
        self._creates = 0

    def get(self, task_id):
        item = self.items.get(task_id)
        return copy.deepcopy(item) if item else None

    def require(self, task_id):
        task = self.get(task_id)
        if task is None:
            raise NotFoundError('Task', task_id)
        return task

    def create(self, item):
        index = self._creates
        self._creates += 1
        if index in self.fail_on_create:
            raise ClientError(
                {'Error': {'Code': 'ProvisionedThroughputExceededException', 'Message': 'slow down'}},
                'PutItem'
            )
        item = dict(item)
        item['version'] = 1
        TaskStore._check(item)
        if item['taskId'] in self.items:
            raise InvalidStateError(f"Task {item['taskId']} already exists")
        self.items[item['taskId']] = copy.deepcopy(item)
        self.writes += 1
        return item

    def save(self, task, expected_status):
        current = self.items.get(task['taskId'])
        if current is None or current['status'] != expected_status or current.get('version') != task.get('version'):
            raise InvalidStateError(
                f"Task {task['taskId']} was changed by someone else; re-fetch it and try again",
                current_status=expected_status
            )
        item = dict(task)
        item['version'] = (task.get('version') or 0) + 1
        TaskStore._check(item)
        self.items[item['taskId']] = copy.deepcopy(item)
        self.writes += 1
        return item

    def query_by_status(self, status):
        return [copy.deepcopy(t) for t in self.items.values() if t['status'] == status]

    def query_by_category(self, category):
        return [copy.deepcopy(t) for t in self.items.values() if t['category'] == category]

    def query_by_assignee(self, user_id):
        return [copy.deepcopy(t) for t in self.items.values() if user_id in t.get('assignedTo', [])]

    def scan_all(self):
        return [copy.deepcopy(t) for t in self.items.values()]


class InMemoryUserStore:
    def __init__(self, user_ids=()):
        self.users = {
            user_id: {'userId': user_id, 'name': user_id.upper(), 'isActive': True}
            for user_id in user_ids
        }

    def get(self, user_id):
        return self.users.get(user_id)

    def missing(self, user_ids):
        return [u for u in user_ids if u not in self.users]

    def list_users(self):
        return list(self.users.values())

    def record_approval(self, user_id, rating, earnings, now=None):
        user = self.users.setdefault(user_id, {'userId': user_id})
        user['completedTasks'] = user.get('completedTasks', 0) + 1
        user['reviewCount'] = user.get('reviewCount', 0) + 1
        user['ratingTotal'] = Decimal(user.get('ratingTotal', 0)) + rating
        user['totalEarnings'] = Decimal(user.get('totalEarnings', 0)) + earnings
        return dict(user)

    def set_rating(self, user_id, rating):
        self.users[user_id]['rating'] = rating


NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

ANNOTATION_OVERRIDES = {
    'title': 'Label street scenes',
    'description': 'Draw boxes around every vehicle in each photo.',
    'hourlyRate': 15,
    'estimatedHours': 2,
    'inputs': ['https://example.com/scenes/0001.jpg'],
}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def user_store():
    return InMemoryUserStore(['U1', 'U2', 'U3'])


@pytest.fixture
def make_task(store, now):
    """Create a DATA_ANNOTATION task, optionally overriding template fields."""
    from shared.authoring import create_from_template

    def _make(**overrides):
        values = dict(ANNOTATION_OVERRIDES)
        values.update(overrides)
        return create_from_template(store, 'DATA_ANNOTATION', values, 'admin-1', now)

    return _make


@pytest.fixture
def submitted_task(store, make_task, now):
    """A task assigned to U1 and submitted for review with 2.5 hours."""
    from handlers.tasks.assign_task import assign
    from handlers.submissions.submit_work import submit

    task = make_task()
    assign(store, task['taskId'], ['U1'], now=now)
    return submit(store, task['taskId'], 'U1', notes='done', deliverables=['s3://out/1.json'],
                  actual_hours=Decimal('2.5'), now=now)


def api_event(sub='admin-1', groups='admin', body=None, path=None, query=None):
    """Build an API Gateway proxy event with Cognito claims."""
    event = {
        'requestContext': {'authorizer': {'claims': {'sub': sub, 'cognito:groups': groups}}},
        'pathParameters': path or {},
        'queryStringParameters': query,
        'body': json.dumps(body) if body is not None else None,
    }
    if sub is None:
        event['requestContext'] = {}
    return event
