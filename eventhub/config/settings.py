import os
from pathlib import Path

from .environment import IS_PRODUCTION_ENVIRONMENT

class Config:
    # Flask configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev')
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_UPLOAD_BYTES', str(5 * 1024 * 1024)))
    SESSION_COOKIE_SECURE = IS_PRODUCTION_ENVIRONMENT

    # API configuration
    API_BASE_URL = os.getenv('API_BASE_URL', 'http://localhost:5000')
    API_TIMEOUT = int(os.getenv('API_TIMEOUT', '30'))
    # Replaced by an httpx.MockTransport in tests
    API_TRANSPORT = None

    # Command-line tool
    CREDENTIAL_FILE = os.getenv(
        'EVENTHUB_CREDENTIAL_FILE',
        str(Path.home() / '.eventhub' / 'credentials.json')
    )

class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    API_BASE_URL = 'http://api.test'
    API_TIMEOUT = 5
