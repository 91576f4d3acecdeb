"""
Partner DB Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urlparse
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

_LOCAL_HOSTS = ('localhost', '127.0.0.1', '::1')


class Config:
    """Application configuration."""

    # Database: must be set in .env; never hardcode credentials here
    DATABASE_URL = os.getenv('DATABASE_URL')
    if not DATABASE_URL:
        _logger.critical("DATABASE_URL is not set, cannot start. Copy .env.example to .env and configure it.")
        raise ValueError("DATABASE_URL environment variable is not set. Copy .env.example to .env and configure it.")

    # Object storage (any S3-compatible endpoint: MinIO, R2, AWS)
    S3_ENDPOINT_URL = os.getenv('S3_ENDPOINT_URL') or None
    S3_BUCKET = os.getenv('S3_BUCKET', 'partnerdb-files')
    S3_REGION = os.getenv('S3_REGION', 'us-east-1')
    S3_ACCESS_KEY = os.getenv('S3_ACCESS_KEY', '')
    S3_SECRET_KEY = os.getenv('S3_SECRET_KEY', '')
    UPLOAD_MAX_BYTES = int(os.getenv('UPLOAD_MAX_BYTES', str(20 * 1024 * 1024)))

    if S3_ENDPOINT_URL:
        _parsed = urlparse(S3_ENDPOINT_URL)
        if _parsed.scheme == 'http' and _parsed.hostname not in _LOCAL_HOSTS:
            _logger.warning(
                f"S3_ENDPOINT_URL uses plain HTTP to a remote host ({_parsed.hostname}). "
                "Uploaded documents are sensitive; use HTTPS."
            )

    # HTTP API
    API_HOST = os.getenv('API_HOST', '127.0.0.1')
    API_PORT = int(os.getenv('API_PORT', '8787'))
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]


# Singleton instance
config = Config()
