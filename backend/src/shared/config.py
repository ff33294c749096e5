"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the task engine.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    TASKS_TABLE = os.environ.get('TASKS_TABLE', '')
    USERS_TABLE = os.environ.get('USERS_TABLE', '')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Authoring limits
    MAX_BULK_TASKS = int(os.environ.get('MAX_BULK_TASKS', '50'))
    DEFAULT_DEADLINE_DAYS = int(os.environ.get('DEFAULT_DEADLINE_DAYS', '7'))

    # Analytics
    RECENT_ACTIVITY_DAYS = int(os.environ.get('RECENT_ACTIVITY_DAYS', '7'))


config = Config()
