"""
Task template catalog.

One template per task category. A template lists the fields a task of that
category is authored with (partitioned into wizard sections), the default
values used to seed a new task, and example payloads used for bulk seeding.

The catalog is static; every accessor hands out deep copies so callers can
never mutate the shared definitions.
"""
import copy
from decimal import Decimal
from typing import Any, Dict, List

from .errors import NotFoundError
from .models import TaskCategory, TemplateSection, Priority, DifficultyLevel
from .validation import check_field


def _field(field_id, label, kind, section, required=False, validator=None, options=None):
    field = {
        'id': field_id,
        'label': label,
        'kind': kind,
        'required': required,
        'section': section,
    }
    if validator:
        field['validator'] = validator
    if options:
        field['options'] = list(options)
    return field


def common_fields(title_label='Task Title', description_label='Task Description'):
    """Fields every template shares. Category fields are appended after these."""
    return [
        _field('title', title_label, 'text', TemplateSection.BASIC, required=True),
        _field('description', description_label, 'textarea', TemplateSection.BASIC, required=True),
        _field('type', 'Task Type', 'text', TemplateSection.BASIC),
        _field('priority', 'Priority', 'select', TemplateSection.BASIC, options=Priority.ALL),
        _field('difficultyLevel', 'Difficulty', 'select', TemplateSection.BASIC,
               options=DifficultyLevel.ALL),
        _field('instructions', 'Instructions', 'textarea', TemplateSection.CONTENT, required=True),
        _field('guidelines', 'Guidelines', 'textarea', TemplateSection.CONTENT),
        _field('inputs', 'Test Content', 'list', TemplateSection.CONTENT),
        _field('expectedOutput', 'Expected Output', 'textarea', TemplateSection.CONTENT),
        _field('requirements', 'Requirements', 'tags', TemplateSection.REQUIREMENTS),
        _field('deliverables', 'Deliverables', 'tags', TemplateSection.REQUIREMENTS),
        _field('qualityMetrics', 'Quality Metrics', 'tags', TemplateSection.REQUIREMENTS),
        _field('requiredSkills', 'Required Skills', 'tags', TemplateSection.REQUIREMENTS),
        _field('domainExpertise', 'Domain Expertise', 'text', TemplateSection.REQUIREMENTS),
        _field('estimatedHours', 'Estimated Hours', 'number', TemplateSection.PAYMENT,
               required=True, validator='positive'),
        _field('hourlyRate', 'Hourly Rate', 'number', TemplateSection.PAYMENT,
               required=True, validator='positive'),
        _field('deadline', 'Deadline', 'date', TemplateSection.PAYMENT),
    ]


LANGUAGES = ('en', 'es', 'fr', 'de', 'it', 'pt', 'zh', 'ja', 'ar')


_TEMPLATES = [
    {
        'id': TaskCategory.AI_TRAINING,
        'name': 'AI Training',
        'description': 'Evaluate and improve AI model responses for quality and accuracy',
        'fields': common_fields() + [
            _field('modelName', 'Model Under Training', 'text', TemplateSection.CONTENT),
            _field('responseLanguage', 'Response Language', 'select', TemplateSection.CONTENT,
                   options=LANGUAGES),
        ],
        'defaultValues': {
            'type': 'multilingual-training',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.INTERMEDIATE,
            'instructions': (
                'AI TRAINING TASK INSTRUCTIONS:\n\n'
                'OBJECTIVE:\nEvaluate and improve AI model responses for quality, '
                'accuracy, and cultural appropriateness.\n\n'
                'METHODOLOGY:\n'
                '1. Review each AI-generated response carefully\n'
                '2. Assess for factual accuracy, tone, and cultural sensitivity\n'
                '3. Provide improved responses where needed\n'
                '4. Document reasoning for all changes'
            ),
            'guidelines': 'Focus on quality over speed. Each response should be thoroughly evaluated.',
            'requiredSkills': ['Natural Language Processing', 'Multilingual Communication'],
            'qualityMetrics': ['Response accuracy > 95%', 'Cultural appropriateness', 'Tone consistency'],
            'deliverables': ['Rated and corrected responses', 'Notes explaining each change'],
            'domainExpertise': 'Linguistics, AI/ML',
            'hourlyRate': Decimal('18'),
            'estimatedHours': Decimal('2'),
        },
        'examples': [
            {
                'title': 'Conversational AI Response Evaluation',
                'description': 'Rate chatbot answers for helpfulness, accuracy and tone.',
                'inputs': [
                    'User: How do I reset my password? '
                    'Assistant: Click "Forgot password" on the login page.'
                ],
                'sampleData': {'responseLanguage': 'en'},
            },
            {
                'title': 'Creative Writing for AI Training',
                'description': 'Write short original stories that follow the given prompt style.',
                'inputs': ['Prompt: a lighthouse keeper who collects lost letters'],
                'sampleData': {'responseLanguage': 'en'},
            },
        ],
    },
    {
        'id': TaskCategory.DATA_ANNOTATION,
        'name': 'Data Annotation',
        'description': 'Label, classify, and annotate data for machine learning',
        'fields': common_fields() + [
            _field('annotationType', 'Annotation Type', 'select', TemplateSection.CONTENT,
                   options=('image_classification', 'object_detection', 'text_classification',
                            'sentiment_analysis', 'named_entity_recognition', 'bounding_box',
                            'segmentation')),
            _field('imageUrl', 'Image URL', 'url', TemplateSection.CONTENT, validator='url'),
            _field('datasetUrl', 'Dataset URL/Source', 'url', TemplateSection.CONTENT,
                   validator='url'),
            _field('categories', 'Categories/Labels', 'tags', TemplateSection.CONTENT,
                   validator='labels'),
        ],
        'defaultValues': {
            'type': 'annotation',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.BEGINNER,
            'instructions': (
                'DATA ANNOTATION GUIDELINES:\n\n'
                'TASK OVERVIEW:\nClassify and annotate the provided dataset according '
                'to the specified categories.\n\n'
                'INSTRUCTIONS:\n'
                '1. Review each item in the dataset\n'
                '2. Apply appropriate labels/classifications\n'
                '3. Ensure consistency across all annotations\n'
                '4. Flag any ambiguous or unclear items'
            ),
            'guidelines': 'Maintain consistency. When in doubt, flag for review.',
            'requiredSkills': ['Attention to Detail', 'Pattern Recognition'],
            'qualityMetrics': ['Accuracy > 95%', 'Consistency', 'Completeness'],
            'deliverables': ['Annotated dataset export'],
            'domainExpertise': 'Data Labeling',
            'hourlyRate': Decimal('15'),
            'estimatedHours': Decimal('2'),
        },
        'examples': [
            {
                'title': 'Image Classification - Animals',
                'description': 'Classify images of animals into species.',
                'inputs': ['https://example.com/datasets/animals/batch-001.zip'],
                'sampleData': {
                    'annotationType': 'image_classification',
                    'categories': ['cat', 'dog', 'bird', 'fish'],
                    'datasetUrl': 'https://example.com/datasets/animals',
                },
            },
            {
                'title': 'Autonomous Vehicle Object Detection',
                'description': 'Draw bounding boxes around vehicles and pedestrians in street scenes.',
                'inputs': ['https://example.com/datasets/street-scenes/frame-0001.jpg'],
                'sampleData': {
                    'annotationType': 'bounding_box',
                    'categories': ['car', 'truck', 'pedestrian', 'cyclist'],
                },
            },
        ],
    },
    {
        'id': TaskCategory.MODEL_EVALUATION,
        'name': 'Code Review',
        'description': 'Bug detection, code quality assessment, security review',
        'fields': common_fields() + [
            _field('repositoryUrl', 'Repository URL', 'url', TemplateSection.CONTENT,
                   validator='url'),
            _field('programmingLanguage', 'Programming Language', 'text', TemplateSection.CONTENT),
        ],
        'defaultValues': {
            'type': 'code-review',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.ADVANCED,
            'instructions': (
                'CODE REVIEW TASK:\n\n'
                'OBJECTIVE:\nReview the provided code for quality, security, and best practices.\n\n'
                'REVIEW CRITERIA:\n'
                '1. Code correctness and logic\n'
                '2. Security vulnerabilities\n'
                '3. Performance considerations\n'
                '4. Code style and readability'
            ),
            'guidelines': 'Focus on critical issues first. Provide constructive feedback.',
            'requiredSkills': ['Programming', 'Code Analysis', 'Security'],
            'qualityMetrics': ['Issue identification rate', 'False positive rate < 5%'],
            'deliverables': ['Line-by-line review', 'Issues categorized by severity'],
            'domainExpertise': 'Software Development',
            'hourlyRate': Decimal('25'),
            'estimatedHours': Decimal('2'),
        },
        'examples': [
            {
                'title': 'Generated Code Security Review',
                'description': 'Review model-generated Python functions for injection and auth flaws.',
                'inputs': ['def get_user(name): return db.execute(f"SELECT * FROM users WHERE name={name}")'],
                'sampleData': {'programmingLanguage': 'python'},
            },
        ],
    },
    {
        'id': TaskCategory.CONTENT_MODERATION,
        'name': 'Content Moderation',
        'description': 'Review and moderate user-generated content',
        'fields': common_fields() + [
            _field('contentType', 'Content Type', 'select', TemplateSection.CONTENT,
                   options=('text', 'images', 'videos', 'comments', 'mixed')),
            _field('moderationCriteria', 'Moderation Criteria', 'tags', TemplateSection.CONTENT),
            _field('sensitivityLevel', 'Content Sensitivity Level', 'select',
                   TemplateSection.REQUIREMENTS, options=('low', 'medium', 'high')),
        ],
        'defaultValues': {
            'type': 'moderation',
            'priority': Priority.HIGH,
            'difficultyLevel': DifficultyLevel.INTERMEDIATE,
            'instructions': (
                'CONTENT MODERATION GUIDELINES:\n\n'
                'Review each item against the moderation criteria.\n'
                '1. Decide whether the item violates policy\n'
                '2. Record the violated rule for every removal\n'
                '3. Escalate anything involving risk of harm'
            ),
            'guidelines': 'Apply the policy consistently. Escalate when unsure.',
            'requiredSkills': ['Content Review', 'Policy Analysis'],
            'qualityMetrics': ['Accuracy > 98%', 'Consistency'],
            'deliverables': ['Moderation decision per item'],
            'hourlyRate': Decimal('20'),
            'estimatedHours': Decimal('1'),
        },
        'examples': [
            {
                'title': 'Social Media Post Review',
                'description': 'Review social media posts for policy violations.',
                'inputs': ['Post: Buy followers now!!! Limited offer, click the link'],
                'sampleData': {
                    'contentType': 'mixed',
                    'moderationCriteria': ['spam', 'hate_speech', 'inappropriate'],
                },
            },
        ],
    },
    {
        'id': TaskCategory.TRANSCRIPTION,
        'name': 'Transcription',
        'description': 'Convert audio/video content to text',
        'fields': common_fields() + [
            _field('audioUrl', 'Audio/Video URL', 'url', TemplateSection.CONTENT, validator='url'),
            _field('audioLength', 'Audio Length (minutes)', 'number', TemplateSection.CONTENT,
                   validator='audio_minutes'),
            _field('transcriptionType', 'Transcription Type', 'select', TemplateSection.CONTENT,
                   options=('verbatim', 'clean', 'timestamps', 'speaker_labels')),
            _field('audioQuality', 'Audio Quality', 'select', TemplateSection.CONTENT,
                   options=('excellent', 'good', 'fair', 'poor')),
        ],
        'defaultValues': {
            'type': 'transcription',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.BEGINNER,
            'instructions': (
                'TRANSCRIPTION TASK:\n\n'
                'Transcribe the audio exactly as spoken.\n'
                '1. Label each speaker\n'
                '2. Mark inaudible sections with [inaudible]\n'
                '3. Proofread the transcript before submitting'
            ),
            'requiredSkills': ['Listening', 'Typing', 'Attention to Detail'],
            'qualityMetrics': ['Accuracy > 98%', 'Proper formatting'],
            'deliverables': ['Transcript file'],
            'hourlyRate': Decimal('18'),
            'estimatedHours': Decimal('2'),
        },
        'examples': [
            {
                'title': 'Podcast Episode Transcription',
                'description': 'Transcribe a 30 minute interview podcast with two speakers.',
                'inputs': ['https://example.com/audio/episode-42.mp3'],
                'sampleData': {
                    'audioUrl': 'https://example.com/audio/episode-42.mp3',
                    'audioLength': 30,
                    'transcriptionType': 'speaker_labels',
                },
            },
        ],
    },
    {
        'id': TaskCategory.TRANSLATION,
        'name': 'Translation',
        'description': 'Translate content between languages',
        'fields': common_fields() + [
            _field('sourceLanguage', 'Source Language', 'select', TemplateSection.CONTENT,
                   options=LANGUAGES),
            _field('targetLanguage', 'Target Language', 'select', TemplateSection.CONTENT,
                   validator='distinct_language', options=LANGUAGES),
            _field('contentToTranslate', 'Content to Translate', 'textarea',
                   TemplateSection.CONTENT),
            _field('translationStyle', 'Translation Style', 'select', TemplateSection.CONTENT,
                   options=('formal', 'informal', 'technical', 'marketing', 'legal')),
        ],
        'defaultValues': {
            'type': 'translation',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.INTERMEDIATE,
            'instructions': (
                'TRANSLATION TASK:\n\n'
                'Translate the content into the target language.\n'
                '1. Preserve meaning and tone\n'
                '2. Keep formatting and placeholders intact\n'
                '3. Note any culturally specific terms you adapted'
            ),
            'requiredSkills': ['Translation', 'Proofreading'],
            'qualityMetrics': ['Meaning preserved', 'Fluent target text'],
            'deliverables': ['Translated text'],
            'hourlyRate': Decimal('25'),
            'estimatedHours': Decimal('3'),
        },
        'examples': [
            {
                'title': 'English to Spanish Product Copy',
                'description': 'Translate product descriptions for an online store into Spanish.',
                'inputs': ['Lightweight waterproof jacket with adjustable hood.'],
                'sampleData': {
                    'sourceLanguage': 'en',
                    'targetLanguage': 'es',
                    'translationStyle': 'marketing',
                },
            },
        ],
    },
    {
        'id': TaskCategory.RESEARCH,
        'name': 'Research',
        'description': 'Gather and analyze information on specific topics',
        'fields': common_fields('Research Title', 'Research Objective') + [
            _field('researchType', 'Research Type', 'select', TemplateSection.CONTENT,
                   options=('market_research', 'competitor_analysis', 'academic_research',
                            'fact_checking', 'data_collection', 'survey_analysis')),
            _field('researchQuestions', 'Research Questions', 'textarea', TemplateSection.CONTENT),
            _field('sourcesRequired', 'Required Sources', 'tags', TemplateSection.REQUIREMENTS),
            _field('deliverableFormat', 'Deliverable Format', 'select',
                   TemplateSection.REQUIREMENTS,
                   options=('report', 'presentation', 'spreadsheet', 'summary')),
        ],
        'defaultValues': {
            'type': 'research',
            'priority': Priority.MEDIUM,
            'difficultyLevel': DifficultyLevel.ADVANCED,
            'instructions': (
                'RESEARCH METHODOLOGY:\n\n'
                '1. Answer each research question with cited sources\n'
                '2. Verify every figure against a second source\n'
                '3. Summarize findings with actionable insights'
            ),
            'requiredSkills': ['Research', 'Analysis', 'Report Writing'],
            'qualityMetrics': ['Accuracy > 95%', 'Source verification', 'Actionable insights'],
            'deliverables': ['Written report'],
            'hourlyRate': Decimal('30'),
            'estimatedHours': Decimal('8'),
        },
        'examples': [
            {
                'title': 'Fact Checking - Health Claims',
                'description': 'Verify popular health claims against peer-reviewed sources.',
                'inputs': ['Claim: drinking eight glasses of water a day is required for health'],
                'sampleData': {'researchType': 'fact_checking', 'deliverableFormat': 'summary'},
            },
        ],
    },
]

_CATALOG = {template['id']: template for template in _TEMPLATES}


def list_templates() -> List[Dict[str, Any]]:
    """Return every template, in catalog order."""
    return copy.deepcopy(_TEMPLATES)


def get_template(template_id: str) -> Dict[str, Any]:
    """
    Look up a template by its category key.

    Raises:
        NotFoundError: no template exists for template_id
    """
    template = _CATALOG.get(template_id)
    if template is None:
        raise NotFoundError('Template', str(template_id))
    return copy.deepcopy(template)


def fields_for_section(template: Dict[str, Any], section: str) -> List[Dict[str, Any]]:
    """Fields of one wizard section, in template order."""
    return [field for field in template['fields'] if field['section'] == section]


def validate_section(template: Dict[str, Any], section: str, values: Dict[str, Any]) -> List[str]:
    """
    Validate only the fields belonging to one wizard section.

    Args:
        template: Template the task is being authored from
        section: One of TemplateSection.ALL
        values: The draft task values collected so far

    Returns:
        List of field-level error messages, empty when the section is valid
    """
    if section not in TemplateSection.ALL:
        return [f"section: must be one of {', '.join(TemplateSection.ALL)}"]

    errors = []
    for field in fields_for_section(template, section):
        error = check_field(field, values)
        if error:
            errors.append(error)
    return errors
