"""Process-wide settings loaded from the environment."""

import os
from typing import List, Optional

from pydantic import BaseModel, Field


def _split_ids(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in (raw or '').split(',') if part.strip()]


class Settings(BaseModel):
    """Runtime configuration for the ingestion pipeline."""

    telegram_bot_token: str = ''
    telegram_allowed_users: List[str] = Field(default_factory=list)
    telegram_webhook_secret: Optional[str] = None
    telegram_api_base: str = 'https://api.telegram.org'

    receipts_bucket: Optional[str] = None
    receipts_folder: str = './receipts'

    expenses_table: str = 'canteen-ledger-expenses'
    incomes_table: str = 'canteen-ledger-incomes'
    users_table: str = 'canteen-ledger-users'
    categories_table: str = 'canteen-ledger-categories'

    bedrock_model_id: str = 'anthropic.claude-3-5-sonnet-20240620-v1:0'
    bedrock_max_tokens: int = 2048
    aws_region: Optional[str] = None

    @property
    def use_remote_storage(self) -> bool:
        """Whether receipts go to S3 rather than the local folder."""
        return bool(self.receipts_bucket)

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from environment variables.

        Unset variables fall back to the model defaults.
        """
        env = os.environ
        values = {
            'telegram_bot_token': env.get('TELEGRAM_BOT_TOKEN', ''),
            'telegram_allowed_users': _split_ids(env.get('TELEGRAM_ALLOWED_USERS')),
            'telegram_webhook_secret': env.get('TELEGRAM_WEBHOOK_SECRET') or None,
            'receipts_bucket': env.get('RECEIPTS_BUCKET') or None,
            'aws_region': env.get('AWS_REGION') or env.get('AWS_DEFAULT_REGION'),
        }

        optional = {
            'telegram_api_base': 'TELEGRAM_API_BASE',
            'receipts_folder': 'RECEIPTS_FOLDER',
            'expenses_table': 'EXPENSES_TABLE',
            'incomes_table': 'INCOMES_TABLE',
            'users_table': 'USERS_TABLE',
            'categories_table': 'CATEGORIES_TABLE',
            'bedrock_model_id': 'BEDROCK_MODEL_ID',
            'bedrock_max_tokens': 'BEDROCK_MAX_TOKENS',
        }
        for field_name, env_name in optional.items():
            if env.get(env_name):
                values[field_name] = env[env_name]

        return cls(**values)
