"""
DynamoDB access for task and user records.

Every task write is a conditional put: new items require that the id is unused,
updates require that status and version are still what the caller read. A
lost race surfaces as InvalidStateError so the caller can re-fetch and decide.
"""
import boto3
from typing import Any, Dict, List, Optional
from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import ClientError

from .config import config
from .errors import TaskError, NotFoundError, InvalidStateError
from .lifecycle import invariant_violations
from .logging import logger
from .utils import isoformat, utc_now

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') == CONDITIONAL_CHECK_FAILED


def _collect(operation, **params) -> List[Dict[str, Any]]:
    """Run a query or scan to exhaustion, following LastEvaluatedKey."""
    items = []
    while True:
        response = operation(**params)
        items.extend(response.get('Items', []))
        last_key = response.get('LastEvaluatedKey')
        if not last_key:
            return items
        params['ExclusiveStartKey'] = last_key


class TaskStore:
    """Task records in the tasks table (partition key taskId)."""

    STATUS_INDEX = 'StatusIndex'
    CATEGORY_INDEX = 'CategoryIndex'

    def __init__(self, table=None):
        self.table = table if table is not None else dynamodb.Table(config.TASKS_TABLE)

    def get(self, task_id: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key={'taskId': task_id}, ConsistentRead=True)
        return response.get('Item')

    def require(self, task_id: str) -> Dict[str, Any]:
        task = self.get(task_id)
        if task is None:
            raise NotFoundError('Task', task_id)
        return task

    def create(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Write a brand new task. Fails if the id is already taken."""
        item = dict(item)
        item['version'] = 1
        self._check(item)
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression='attribute_not_exists(taskId)'
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise InvalidStateError(f"Task {item['taskId']} already exists")
            raise
        logger.info(f"Created task {item['taskId']} ({item.get('category')}, {item.get('status')})")
        return item

    def save(self, task: Dict[str, Any], expected_status: str) -> Dict[str, Any]:
        """
        Replace a task, compare-and-set on the status and version the caller read.

        Args:
            task: Full new task record, carrying the version that was read
            expected_status: Status the record must still have in the table

        Returns:
            The written record with its version bumped

        Raises:
            InvalidStateError: someone else changed the task first
        """
        current_version = task.get('version')
        item = dict(task)
        item['version'] = (current_version or 0) + 1
        self._check(item)

        names = {'#status': 'status'}
        values = {':expected': expected_status}
        if current_version is None:
            condition = '#status = :expected AND attribute_not_exists(version)'
        else:
            condition = '#status = :expected AND version = :version'
            values[':version'] = current_version

        try:
            self.table.put_item(
                Item=item,
                ConditionExpression=condition,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                logger.warning(f"Lost concurrent update on task {item['taskId']} (expected {expected_status})")
                raise InvalidStateError(
                    f"Task {item['taskId']} was changed by someone else; re-fetch it and try again",
                    current_status=expected_status
                )
            raise
        return item

    def query_by_status(self, status: str) -> List[Dict[str, Any]]:
        return _collect(
            self.table.query,
            IndexName=self.STATUS_INDEX,
            KeyConditionExpression=Key('status').eq(status)
        )

    def query_by_category(self, category: str) -> List[Dict[str, Any]]:
        return _collect(
            self.table.query,
            IndexName=self.CATEGORY_INDEX,
            KeyConditionExpression=Key('category').eq(category)
        )

    def query_by_assignee(self, user_id: str) -> List[Dict[str, Any]]:
        return _collect(self.table.scan, FilterExpression=Attr('assignedTo').contains(user_id))

    def scan_all(self) -> List[Dict[str, Any]]:
        return _collect(self.table.scan)

    @staticmethod
    def _check(item: Dict[str, Any]) -> None:
        violations = invariant_violations(item)
        if violations:
            logger.error(f"Refusing to write task {item.get('taskId')}: {violations}")
            raise TaskError('Task record would be inconsistent', {'violations': violations})


class UserStore:
    """Read access to users plus the counters maintained on approval."""

    def __init__(self, table=None):
        self.table = table if table is not None else dynamodb.Table(config.USERS_TABLE)

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key={'userId': user_id})
        return response.get('Item')

    def missing(self, user_ids: List[str]) -> List[str]:
        """Ids in user_ids that have no user record."""
        return [user_id for user_id in user_ids if self.get(user_id) is None]

    def list_users(self) -> List[Dict[str, Any]]:
        return _collect(self.table.scan)

    def record_approval(self, user_id: str, rating: int, earnings, now=None) -> Dict[str, Any]:
        """
        Atomically count an approved task against a user.

        Returns:
            The user record after the update
        """
        timestamp = isoformat(now or utc_now())
        response = self.table.update_item(
            Key={'userId': user_id},
            UpdateExpression=(
                'ADD completedTasks :one, reviewCount :one, ratingTotal :rating, '
                'totalEarnings :earnings SET updatedAt = :ts'
            ),
            ExpressionAttributeValues={
                ':one': 1,
                ':rating': rating,
                ':earnings': earnings,
                ':ts': timestamp
            },
            ReturnValues='ALL_NEW'
        )
        return response.get('Attributes', {})

    def set_rating(self, user_id: str, rating) -> None:
        self.table.update_item(
            Key={'userId': user_id},
            UpdateExpression='SET rating = :rating',
            ExpressionAttributeValues={':rating': rating}
        )


_task_store = None
_user_store = None


def get_task_store() -> TaskStore:
    global _task_store
    if _task_store is None:
        _task_store = TaskStore()
    return _task_store


def get_user_store() -> UserStore:
    global _user_store
    if _user_store is None:
        _user_store = UserStore()
    return _user_store
