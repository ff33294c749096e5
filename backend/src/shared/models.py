"""
Data models and status constants for the task engine.
Based on the task lifecycle: Available → Assigned → In Progress → Under Review → Approved / Rejected
A rejected task is either reopened (back to Assigned) or cancelled.
"""


class TaskStatus:
    """Task lifecycle statuses. The only status vocabulary used across handlers."""
    AVAILABLE = 'AVAILABLE'
    ASSIGNED = 'ASSIGNED'
    IN_PROGRESS = 'IN_PROGRESS'
    UNDER_REVIEW = 'UNDER_REVIEW'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'  # Transient: resolved to ASSIGNED or CANCELLED within the same review
    CANCELLED = 'CANCELLED'

    ALL = (AVAILABLE, ASSIGNED, IN_PROGRESS, UNDER_REVIEW, APPROVED, REJECTED, CANCELLED)
    TERMINAL = (APPROVED, CANCELLED)
    SUBMITTABLE = (ASSIGNED, IN_PROGRESS)


class TaskCategory:
    """Work categories. Each one has a template in the catalog."""
    AI_TRAINING = 'AI_TRAINING'
    DATA_ANNOTATION = 'DATA_ANNOTATION'
    MODEL_EVALUATION = 'MODEL_EVALUATION'
    CONTENT_MODERATION = 'CONTENT_MODERATION'
    TRANSCRIPTION = 'TRANSCRIPTION'
    TRANSLATION = 'TRANSLATION'
    RESEARCH = 'RESEARCH'

    ALL = (
        AI_TRAINING,
        DATA_ANNOTATION,
        MODEL_EVALUATION,
        CONTENT_MODERATION,
        TRANSCRIPTION,
        TRANSLATION,
        RESEARCH,
    )


class Priority:
    """Task priorities."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    ALL = (LOW, MEDIUM, HIGH, CRITICAL)


class DifficultyLevel:
    """Skill level a task is aimed at."""
    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    EXPERT = 'expert'

    ALL = (BEGINNER, INTERMEDIATE, ADVANCED, EXPERT)


class ReviewAction:
    """Admin review decisions."""
    APPROVE = 'approve'
    REJECT = 'reject'

    ALL = (APPROVE, REJECT)


class PaymentStatus:
    """Settlement state of an approved task."""
    NONE = 'NONE'
    PENDING = 'PENDING'
    PAID = 'PAID'
    NOT_PAYABLE = 'NOT_PAYABLE'  # Approved quality-control tasks


class TemplateSection:
    """Wizard sections a template's fields are partitioned into."""
    BASIC = 'basic'
    CONTENT = 'content'
    REQUIREMENTS = 'requirements'
    PAYMENT = 'payment'

    ALL = (BASIC, CONTENT, REQUIREMENTS, PAYMENT)


# Fields a caller may set directly on a task when authoring it.
# Anything else must be a category-specific template field (stored under taskData).
AUTHORING_FIELDS = (
    'title',
    'description',
    'category',
    'type',
    'priority',
    'difficultyLevel',
    'instructions',
    'guidelines',
    'inputs',
    'expectedOutput',
    'requirements',
    'deliverables',
    'qualityMetrics',
    'requiredSkills',
    'domainExpertise',
    'estimatedHours',
    'hourlyRate',
    'deadline',
    'assignedTo',
    'isQualityControl',
)

LIST_FIELDS = (
    'inputs',
    'requirements',
    'deliverables',
    'qualityMetrics',
    'requiredSkills',
    'assignedTo',
)

# Submission fields wiped when a rejected task is reopened for rework.
SUBMISSION_FIELDS = ('submissionNotes', 'submissionFiles', 'actualHours', 'submittedAt')

# Text length bounds: (min, max)
TEXT_LIMITS = {
    'title': (5, 200),
    'description': (20, 2000),
    'instructions': (50, 5000),
}

MAX_ESTIMATED_HOURS = 200
MAX_NOTES_LENGTH = 1000
MAX_FEEDBACK_LENGTH = 500
