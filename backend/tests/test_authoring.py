"""
Tests for task authoring: template, freeform and bulk creation.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from shared.authoring import create_from_template, create_freeform, create_bulk, normalize_assignees
from shared.errors import ValidationError, NotFoundError, PartialFailureError
from shared.models import TaskStatus, TaskCategory, PaymentStatus
from shared.utils import isoformat

from conftest import ANNOTATION_OVERRIDES


def freeform_fields(**overrides):
    fields = {
        'category': TaskCategory.RESEARCH,
        'title': 'Survey of vector databases',
        'description': 'Compare the five most used vector databases.',
        'instructions': 'List each database, its license, its index types and its pricing model.',
        'estimatedHours': 6,
        'hourlyRate': Decimal('30'),
    }
    fields.update(overrides)
    return fields


class TestCreateFromTemplate:
    """Tests for template-seeded creation."""

    def test_annotation_task_starts_available(self, store, make_task):
        """A new unassigned task is AVAILABLE with no earnings."""
        task = make_task()

        assert task['status'] == TaskStatus.AVAILABLE
        assert task['totalEarnings'] == 0
        assert task['assignedTo'] == []
        assert task['hourlyRate'] == Decimal('15')
        assert task['estimatedHours'] == Decimal('2')
        assert task['paymentStatus'] == PaymentStatus.NONE
        assert task['createdAt'] == '2026-01-15T12:00:00+00:00'
        assert store.writes == 1

    def test_template_defaults_fill_missing_fields(self, make_task):
        """Omitted fields take the template defaults."""
        task = make_task(hourlyRate=None, estimatedHours=None)
        assert task['hourlyRate'] == 15
        assert task['instructions'].startswith('DATA ANNOTATION GUIDELINES')
        assert task['type'] == 'annotation'
        assert task['difficultyLevel'] == 'beginner'

    def test_deadline_defaults_to_a_week(self, make_task, now):
        """Without a deadline the task is due seven days after creation."""
        task = make_task()
        assert task['deadline'] == isoformat(now + timedelta(days=7))

    def test_initial_assignees_make_it_assigned(self, make_task):
        """Assignees given at creation make the task ASSIGNED."""
        task = make_task(assignedTo=['U1', 'U2', 'U1'])
        assert task['status'] == TaskStatus.ASSIGNED
        assert task['assignedTo'] == ['U1', 'U2']
        assert 'assignedAt' in task

    def test_single_assignee_string_is_accepted(self, make_task):
        """A single id string is treated as a one-worker pool."""
        task = make_task(assignedTo='U1')
        assert task['assignedTo'] == ['U1']

    def test_title_of_five_characters_is_enough(self, make_task):
        """Five characters is the shortest valid title."""
        assert make_task(title='Boxes')['title'] == 'Boxes'

    def test_title_of_four_characters_fails(self, store, make_task):
        """A four-character title fails and nothing is written."""
        with pytest.raises(ValidationError) as exc:
            make_task(title='Boxs')
        assert 'title: must be at least 5 characters' in exc.value.errors
        assert store.writes == 0

    def test_all_problems_reported_together(self, store, make_task):
        """Every field error is reported in one ValidationError."""
        with pytest.raises(ValidationError) as exc:
            make_task(description='too short', hourlyRate=0, estimatedHours=-1)
        errors = exc.value.errors
        assert 'description: must be at least 20 characters' in errors
        assert 'hourlyRate: must be greater than 0' in errors
        assert 'estimatedHours: must be greater than 0' in errors
        assert store.writes == 0

    def test_short_instructions_fail(self, make_task):
        """Instructions need at least 50 characters."""
        with pytest.raises(ValidationError) as exc:
            make_task(instructions='Label it.')
        assert 'instructions: must be at least 50 characters' in exc.value.errors

    def test_annotation_needs_some_content(self, make_task):
        """Annotation tasks need an image, a dataset or inputs."""
        with pytest.raises(ValidationError) as exc:
            make_task(inputs=[])
        assert any(e.startswith('inputs: DATA_ANNOTATION') for e in exc.value.errors)

    def test_dataset_url_satisfies_content_rule(self, make_task):
        """A dataset URL alone satisfies the annotation content rule."""
        task = make_task(inputs=[], datasetUrl='https://example.com/data.zip')
        assert task['taskData'] == {'datasetUrl': 'https://example.com/data.zip'}

    def test_bad_dataset_url(self, make_task):
        """Malformed URLs are rejected."""
        with pytest.raises(ValidationError) as exc:
            make_task(datasetUrl='ftp:/nowhere')
        assert 'datasetUrl: must be an http(s) URL' in exc.value.errors

    def test_deadline_in_the_past_fails(self, make_task, now):
        """A deadline before creation time is rejected."""
        with pytest.raises(ValidationError) as exc:
            make_task(deadline=isoformat(now - timedelta(minutes=1)))
        assert 'deadline: must not be before the creation time' in exc.value.errors

    def test_deadline_date_means_end_of_day(self, make_task):
        """A date-only deadline means the end of that day in UTC."""
        task = make_task(deadline='2026-01-15')
        assert task['deadline'].startswith('2026-01-15T23:59:59')

    def test_unknown_fields_rejected(self, make_task):
        """Fields outside the task and template schema are rejected."""
        with pytest.raises(ValidationError) as exc:
            make_task(bonusPool=100)
        assert 'bonusPool: unknown field' in exc.value.errors

    def test_invalid_enumerations(self, make_task):
        """Unknown priority and difficulty values are rejected."""
        with pytest.raises(ValidationError) as exc:
            make_task(priority='urgent', difficultyLevel='godlike')
        assert any(e.startswith('priority:') for e in exc.value.errors)
        assert any(e.startswith('difficultyLevel:') for e in exc.value.errors)

    def test_category_must_match_template(self, store, now):
        """Overriding the category of a template is rejected."""
        values = dict(ANNOTATION_OVERRIDES, category=TaskCategory.RESEARCH)
        with pytest.raises(ValidationError):
            create_from_template(store, 'DATA_ANNOTATION', values, 'admin-1', now)

    def test_unknown_template(self, store, now):
        """A missing template is NotFound."""
        with pytest.raises(NotFoundError):
            create_from_template(store, 'NOPE', ANNOTATION_OVERRIDES, 'admin-1', now)

    def test_unknown_assignee_is_not_found(self, store, user_store, now):
        """Assignees without a user record are NotFound and nothing is written."""
        values = dict(ANNOTATION_OVERRIDES, assignedTo=['U1', 'GHOST'])
        with pytest.raises(NotFoundError) as exc:
            create_from_template(store, 'DATA_ANNOTATION', values, 'admin-1', now, user_store=user_store)
        assert exc.value.resource_id == 'GHOST'
        assert store.writes == 0

    def test_known_assignees_are_accepted(self, store, user_store, now):
        """Existing users can be assigned at creation."""
        values = dict(ANNOTATION_OVERRIDES, assignedTo=['U1', 'U2'])
        task = create_from_template(store, 'DATA_ANNOTATION', values, 'admin-1', now, user_store=user_store)
        assert task['status'] == TaskStatus.ASSIGNED


class TestCreateFreeform:
    """Tests for creation without template defaults."""

    def test_freeform_task(self, store, now):
        """Category-specific fields are kept under taskData."""
        task = create_freeform(store, freeform_fields(researchType='market_research'), 'admin-1', now)
        assert task['category'] == TaskCategory.RESEARCH
        assert task['type'] == 'research'
        assert task['priority'] == 'medium'
        assert task['taskData'] == {'researchType': 'market_research'}
        assert task['createdBy'] == 'admin-1'

    def test_no_template_defaults_applied(self, store, now):
        """Freeform creation does not fill in a missing rate."""
        fields = freeform_fields()
        del fields['hourlyRate']
        with pytest.raises(ValidationError) as exc:
            create_freeform(store, fields, 'admin-1', now)
        assert 'hourlyRate: is required' in exc.value.errors

    def test_unknown_category(self, store, now):
        """An unknown category is a ValidationError."""
        with pytest.raises(ValidationError) as exc:
            create_freeform(store, freeform_fields(category='GARDENING'), 'admin-1', now)
        assert any(e.startswith('category:') for e in exc.value.errors)

    def test_transcription_needs_audio_or_inputs(self, store, now):
        """Transcription tasks need audio or inputs."""
        fields = freeform_fields(category=TaskCategory.TRANSCRIPTION)
        with pytest.raises(ValidationError):
            create_freeform(store, fields, 'admin-1', now)

        fields['audioUrl'] = 'https://example.com/a.mp3'
        assert create_freeform(store, fields, 'admin-1', now)['status'] == TaskStatus.AVAILABLE

    def test_unknown_assignee_is_not_found(self, store, user_store, now):
        """Freeform creation checks assignees the same way."""
        with pytest.raises(NotFoundError):
            create_freeform(store, freeform_fields(assignedTo='GHOST'), 'admin-1', now, user_store=user_store)
        assert store.writes == 0


class TestCreateBulk:
    """Tests for bulk creation from template examples."""

    def test_ten_ai_training_tasks(self, store, now):
        """Bulk tasks share a batchId and get distinct ids."""
        tasks = create_bulk(store, TaskCategory.AI_TRAINING, 10, 'intermediate', 'admin-1', now)

        assert len(tasks) == 10
        assert len({t['taskId'] for t in tasks}) == 10
        assert len({t['batchId'] for t in tasks}) == 1
        for task in tasks:
            assert task['status'] == TaskStatus.AVAILABLE
            assert task['category'] == TaskCategory.AI_TRAINING
            assert task['difficultyLevel'] == 'intermediate'
            assert task['hourlyRate'] == 18
            assert task['inputs']

    def test_fifty_is_allowed(self, store, now):
        """Fifty is the largest allowed batch."""
        assert len(create_bulk(store, TaskCategory.RESEARCH, 50, 'expert', 'admin-1', now)) == 50

    @pytest.mark.parametrize('count', [0, 51, -3, '10', 2.5, True, None])
    def test_bad_count_writes_nothing(self, store, now, count):
        """Out-of-range counts fail before any write."""
        with pytest.raises(ValidationError):
            create_bulk(store, TaskCategory.RESEARCH, count, 'expert', 'admin-1', now)
        assert store.writes == 0

    def test_bad_difficulty(self, store, now):
        """An unknown difficulty fails before any write."""
        with pytest.raises(ValidationError) as exc:
            create_bulk(store, TaskCategory.RESEARCH, 5, 'heroic', 'admin-1', now)
        assert exc.value.errors[0].startswith('difficulty:')

    def test_partial_failure_keeps_created_subset(self, store, now):
        """Failed writes are reported alongside the tasks that were created."""
        store.fail_on_create = {1, 3}
        with pytest.raises(PartialFailureError) as exc:
            create_bulk(store, TaskCategory.TRANSLATION, 5, 'beginner', 'admin-1', now)

        error = exc.value
        assert len(error.created) == 3
        assert len(error.failures) == 2
        assert store.writes == 3
        assert error.status_code == 207
        assert set(t['taskId'] for t in error.created) == set(store.items)


class TestNormalizeAssignees:
    """Tests for assignee normalization."""

    def test_blank_and_duplicate_ids_dropped(self):
        """Blanks and repeats are dropped, order is kept."""
        assert normalize_assignees([' U1', 'U2', '', 'U1']) == ['U1', 'U2']

    def test_none_is_empty(self):
        """None means an empty pool."""
        assert normalize_assignees(None) == []
