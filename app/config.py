#!/usr/bin/env python3

import os
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Optional
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

DEFAULT_ZELTY_BASE_URL = "https://api.zelty.fr/2.7/"

def load_env_file():
    """Load environment variables from .env file"""
    env_file = os.path.join(os.path.dirname(__file__), '..', '.env')

    if os.path.exists(env_file):
        load_dotenv(env_file)

class Config:
    """Application configuration"""

    def __init__(self):
        # Load environment variables first
        load_env_file()

        # Supabase configuration
        self.supabase_url = self._get_env_var('SUPABASE_URL')
        self.supabase_key = self._get_env_var('SUPABASE_SERVICE_KEY')

        # Zelty configuration
        self.zelty_api_key = self._get_env_var('API_ZELTY_KEY')
        self.zelty_base_url = os.getenv('ZELTY_BASE_URL', DEFAULT_ZELTY_BASE_URL)
        self.zelty_timeout = float(os.getenv('ZELTY_TIMEOUT_SECONDS', '30'))
        self.page_limit = int(os.getenv('ZELTY_PAGE_LIMIT', '100'))
        if self.page_limit < 1:
            raise ValueError(f"ZELTY_PAGE_LIMIT must be a positive integer, got {self.page_limit}")
        self.page_delay = float(os.getenv('ZELTY_PAGE_DELAY_SECONDS', '5'))

        # Scheduler configuration
        self.sync_interval_minutes = int(os.getenv('SYNC_INTERVAL_MINUTES', '5'))
        self.scheduler_enabled = os.getenv('SCHEDULER_ENABLED', 'true').lower() == 'true'
        self.timezone = ZoneInfo(os.getenv('TIMEZONE', 'Europe/Paris'))

        # App configuration
        self.port = int(os.getenv('PORT', '8080'))
        self.host = os.getenv('HOST', '0.0.0.0')
        self.debug = os.getenv('DEBUG', 'false').lower() == 'true'

        # Logging configuration
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_dir: Optional[str] = os.getenv('LOG_DIR') or None

        self._setup_logging()

    def _get_env_var(self, key: str) -> str:
        """Get environment variable and strip quotes if present"""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Missing required environment variable: {key}")

        # Strip quotes if present
        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]

        return value

    def _setup_logging(self):
        """Setup logging configuration"""
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format=log_format
        )

        if not self.log_dir:
            return

        # Daily rotated files, two weeks kept
        os.makedirs(self.log_dir, exist_ok=True)
        root_logger = logging.getLogger()
        for filename, level in (('combined.log', logging.INFO), ('error.log', logging.ERROR)):
            handler = TimedRotatingFileHandler(
                os.path.join(self.log_dir, filename),
                when='midnight',
                backupCount=14,
                encoding='utf-8'
            )
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(log_format))
            root_logger.addHandler(handler)

# Global config instance
config = Config()
