import os
from dotenv import load_dotenv

# Load .env for local development; on the PaaS the dashboard sets the variables
load_dotenv()

# Runtime mode
APP_ENV = os.getenv('APP_ENV', os.getenv('NODE_ENV', 'development')).lower()
IS_PRODUCTION = APP_ENV == 'production'

API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('PORT', os.getenv('API_PORT', 5000)))
API_DEBUG = os.getenv('API_DEBUG', 'False').lower() == 'true'

# Security
SECRET_KEY = os.getenv('SESSION_SECRET', 'your-secret-key')

# Database
DATABASE_URL = os.getenv('DATABASE_URL')
SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'False').lower() == 'true'
SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True, 'pool_recycle': 300}

# Redis (Celery broker, session repository, rate limiter)
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# Sessions
# memory | redis; the in-process store only works with a single worker process
SESSION_BACKEND = os.getenv('SESSION_BACKEND', 'redis' if IS_PRODUCTION else 'memory')
SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'connect.sid')
SESSION_LIFETIME_SECONDS = int(os.getenv('SESSION_LIFETIME_SECONDS', 24 * 60 * 60))
SESSION_SWEEP_INTERVAL_SECONDS = int(os.getenv('SESSION_SWEEP_INTERVAL_SECONDS', 24 * 60 * 60))

# Third-party content providers
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
OPENAI_MODEL_NAME = os.getenv('OPENAI_MODEL_NAME', 'gpt-4o')
UNSPLASH_ACCESS_KEY = os.getenv('UNSPLASH_ACCESS_KEY')

# Generation pipelines
BATCH_MAX_WORKERS = int(os.getenv('BATCH_MAX_WORKERS', 4))
NEWS_SCRAPE_CRON_HOURS = int(os.getenv('NEWS_SCRAPE_CRON_HOURS', 4))

# Unauthenticated admin recovery endpoints (/api/admin-setup, /api/emergency-admin)
ENABLE_ADMIN_RECOVERY = os.getenv('ENABLE_ADMIN_RECOVERY', 'False').lower() == 'true'

# Rate limiting
RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
LOGIN_RATE_LIMIT = os.getenv('LOGIN_RATE_LIMIT', '10 per minute')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE')

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', 'http://localhost:5000,http://localhost:5173').split(',')
    if origin.strip()
]


def get_database_uri():
    """Build the SQLAlchemy database URI from DATABASE_URL."""
    if DATABASE_URL:
        # Heroku/Render style URLs use the deprecated scheme
        if DATABASE_URL.startswith('postgres://'):
            return DATABASE_URL.replace('postgres://', 'postgresql+psycopg2://', 1)
        return DATABASE_URL
    return 'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), '..', 'yourbuzzfeed.db')
