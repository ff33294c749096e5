"""
Update Worker Stats Handler.
Triggered by DynamoDB Streams on the tasks table.
When a task becomes APPROVED, credits the worker's completed count, rating
average and (for payable tasks) earnings on their user record.
"""
from decimal import Decimal, ROUND_HALF_UP

from boto3.dynamodb.types import TypeDeserializer

from shared.compensation import is_payable
from shared.logging import logger
from shared.models import TaskStatus
from shared.task_store import get_user_store
from shared.utils import to_decimal

deserializer = TypeDeserializer()


def _image(record, name) -> dict:
    raw = record.get('dynamodb', {}).get(name) or {}
    return {key: deserializer.deserialize(value) for key, value in raw.items()}


def process_record(record, user_store) -> bool:
    """
    Apply one stream record.
    Returns True if a user's stats were updated, False if the record was ignored.
    """
    if record.get('eventName') != 'MODIFY':
        return False

    new_image = _image(record, 'NewImage')
    old_image = _image(record, 'OldImage')

    # Only the transition into APPROVED counts; replays of the same status do not
    if new_image.get('status') != TaskStatus.APPROVED or old_image.get('status') == TaskStatus.APPROVED:
        return False

    assignees = new_image.get('assignedTo') or []
    if not assignees:
        logger.warning(f"Approved task {new_image.get('taskId')} has no assignee")
        return False

    worker_id = assignees[0]
    earnings = to_decimal(new_image.get('totalEarnings')) if is_payable(new_image) else None
    updated = user_store.record_approval(
        worker_id,
        rating=int(new_image['rating']),
        earnings=earnings or Decimal('0')
    )

    review_count = int(updated.get('reviewCount', 0))
    if review_count > 0:
        average = (Decimal(updated.get('ratingTotal', 0)) / review_count).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )
        user_store.set_rating(worker_id, average)
        logger.info(f"Worker {worker_id}: completedTasks={updated.get('completedTasks')}, rating={average}")
    return True


def handler(event, context):
    """
    Handler triggered by DynamoDB Stream on the tasks table.
    Failed records are reported back so only they are retried.
    """
    records = event.get('Records', [])
    if not records:
        return {'batchItemFailures': []}

    user_store = get_user_store()
    processed = 0
    failures = []
    for record in records:
        try:
            if process_record(record, user_store):
                processed += 1
        except Exception as e:
            logger.exception(f"Error processing stream record {record.get('eventID')}: {e}")
            sequence = record.get('dynamodb', {}).get('SequenceNumber')
            failures.append({'itemIdentifier': sequence})

    logger.info(f"Processed {processed} of {len(records)} stream records")
    return {'batchItemFailures': failures}
