import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    PORT = _env_int('PORT', 3001)
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Comma-separated; *.vercel.app previews are always allowed
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:3000,https://blue-collar-buddy-91j5.vercel.app',
        ).split(',')
        if origin.strip()
    ]
    CORS_ORIGIN_PATTERNS = [r'https://.*\.vercel\.app']

    RATE_LIMIT = os.getenv('RATE_LIMIT', '100 per 15 minutes')
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', True)

    DEFAULT_MAX_RESULTS = _env_int('DEFAULT_MAX_RESULTS', 5)
    MAX_RESULTS_LIMIT = _env_int('MAX_RESULTS_LIMIT', 20)
    MIN_QUERY_LENGTH = 2

    ENABLE_RENDERED_FETCH = _env_flag('ENABLE_RENDERED_FETCH', True)
    HUMAN_DELAY = _env_flag('HUMAN_DELAY', True)
    DIAGNOSTICS_DIR = os.getenv('DIAGNOSTICS_DIR') or None

    VERSION = '2.1.0'
