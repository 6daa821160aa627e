"""
Centralized configuration — env vars, feature secrets, analyzer tunables.
"""
import os


# ── Environment ──────────────────────────────────────────────────────────────
APP_ENV = os.getenv('APP_ENV', 'development').lower()
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis (Celery broker) ─────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── OpenAI ────────────────────────────────────────────────────────────────────
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-5-mini-2025-08-07')

# ── Dashboard login ──────────────────────────────────────────────────────────
DASHBOARD_USERNAME = os.getenv('DASHBOARD_USERNAME', 'moderator')
DASHBOARD_PASSWORD = os.getenv('DASHBOARD_PASSWORD', 'change-this-password')
DASHBOARD_AUTH_SECRET = (
    os.getenv('DASHBOARD_AUTH_SECRET') or os.getenv('CRON_SECRET') or 'change-this-secret'
)
DASHBOARD_AUTH_COOKIE_NAME = 'dashboard_auth'
DASHBOARD_AUTH_COOKIE_MAX_AGE = 60 * 60 * 12  # 12 hours

# ── Per-feature shared secrets ───────────────────────────────────────────────
# Empty string means "not configured": only the session cookie can authorize.
ANALYZE_SECRET = os.getenv('CRON_SECRET') or os.getenv('ANALYZE_API_SECRET') or ''
RESET_SECRET = (
    os.getenv('DASHBOARD_RESET_SECRET')
    or os.getenv('CRON_SECRET')
    or os.getenv('ANALYZE_API_SECRET')
    or ''
)
POLL_ADMIN_SECRET = os.getenv('DASHBOARD_POLL_SECRET') or os.getenv('CRON_SECRET') or ''
RAFFLE_ADMIN_SECRET = os.getenv('RAFFLE_ADMIN_SECRET', '')

# ── Feedback batch analyzer ──────────────────────────────────────────────────
ANALYZE_MIN_BATCH = int(os.getenv('ANALYZE_MIN_BATCH', 10))
ANALYZE_MAX_BATCH = int(os.getenv('ANALYZE_MAX_BATCH', 50))
ANALYZE_INTERVAL_SECONDS = float(os.getenv('ANALYZE_INTERVAL_SECONDS', 300))

# ── Raffle ───────────────────────────────────────────────────────────────────
RAFFLE_PROJECT_CSV = os.getenv(
    'RAFFLE_PROJECT_CSV',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'raffle_participants.csv'),
)
RAFFLE_MAX_IMPORT_LINES = 5000


def is_production():
    """True when running with APP_ENV=production."""
    return APP_ENV == 'production'
