"""Environment-driven configuration."""

import os
import logging
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"


def get_api_key() -> Optional[str]:
    """Gemini API key; accepts GEMINI_API_KEY, GOOGLE_API_KEY or API_KEY."""
    return os.getenv('GEMINI_API_KEY') or os.getenv('GOOGLE_API_KEY') or os.getenv('API_KEY')


def get_model_name() -> str:
    return os.getenv('GEMINI_MODEL', DEFAULT_MODEL)


def get_allow_origins() -> List[str]:
    return os.getenv('ALLOW_ORIGINS', '*').split(',')


def is_debug() -> bool:
    return os.getenv('DEBUG', 'False').lower() == 'true'


def get_mock_student_count() -> int:
    return int(os.getenv('MOCK_STUDENT_COUNT', '25'))


def get_mock_seed() -> Optional[int]:
    """Seed for the demo dataset; unset means a fresh cohort every time."""
    seed = os.getenv('MOCK_SEED')
    if seed is None or seed.strip() == '':
        return None
    return int(seed)


def configure_logging() -> None:
    """Set up root logging from LOG_LEVEL."""
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
