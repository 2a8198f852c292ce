"""
Configuration management for Lead Sync module.

Loads environment variables and provides typed config access.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Find project root and load .env
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / '.env')


class Config:
    """Lead sync configuration."""

    # Environment
    LEAD_SYNC_ENV: str = os.getenv('LEAD_SYNC_ENV', 'dev')

    # Google Sheets
    GOOGLE_SERVICE_ACCOUNT_FILE: str = os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE', '')
    GOOGLE_SPREADSHEET_ID: str = os.getenv('GOOGLE_SPREADSHEET_ID', '')
    GOOGLE_WORKSHEET_NAME: str = os.getenv('GOOGLE_WORKSHEET_NAME', 'Sheet1')

    # Trello
    TRELLO_API_KEY: str = os.getenv('TRELLO_API_KEY', '')
    TRELLO_TOKEN: str = os.getenv('TRELLO_TOKEN', '')
    TRELLO_BOARD_ID: str = os.getenv('TRELLO_BOARD_ID', '')
    TRELLO_BASE_URL: str = os.getenv('TRELLO_BASE_URL', 'https://api.trello.com/1')

    # Sync interval (seconds between the end of one cycle and the start of the next)
    POLL_INTERVAL_SECONDS: int = int(os.getenv('POLL_INTERVAL_SECONDS', '60'))
    HTTP_TIMEOUT: int = int(os.getenv('LEAD_SYNC_HTTP_TIMEOUT', '30'))

    # Mapping snapshot
    MAPPING_PATH: Path = Path(os.getenv('LEAD_SYNC_MAPPING_PATH', str(PROJECT_ROOT / 'data' / 'lead_sync.json')))

    # Logging (set LEAD_SYNC_LOG_LEVEL=DEBUG for verbose output)
    LOG_LEVEL: str = os.getenv('LEAD_SYNC_LOG_LEVEL', 'INFO')
    LOG_FILE: Optional[str] = os.getenv('LEAD_SYNC_LOG_FILE') or None

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration. Returns list of errors."""
        errors = []

        if not cls.GOOGLE_SERVICE_ACCOUNT_FILE:
            errors.append("GOOGLE_SERVICE_ACCOUNT_FILE is required")
        elif not Path(cls.GOOGLE_SERVICE_ACCOUNT_FILE).exists():
            errors.append(f"GOOGLE_SERVICE_ACCOUNT_FILE not found: {cls.GOOGLE_SERVICE_ACCOUNT_FILE}")

        if not cls.GOOGLE_SPREADSHEET_ID:
            errors.append("GOOGLE_SPREADSHEET_ID is required")

        if not cls.TRELLO_API_KEY:
            errors.append("TRELLO_API_KEY is required")

        if not cls.TRELLO_TOKEN:
            errors.append("TRELLO_TOKEN is required")

        if not cls.TRELLO_BOARD_ID:
            errors.append("TRELLO_BOARD_ID is required")

        if cls.POLL_INTERVAL_SECONDS <= 0:
            errors.append("POLL_INTERVAL_SECONDS must be positive")

        return errors


# Singleton instance
config = Config()
