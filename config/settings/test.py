"""
Django Test Settings for the Ignews Backend

Uses SQLite in-memory database for fast testing.
"""
from .base import *  # noqa: F401, F403

# =============================================================================
# Debug Mode for Tests
# =============================================================================

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost', '127.0.0.1']

# =============================================================================
# Database - SQLite in memory
# =============================================================================

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# =============================================================================
# Speed Optimizations for Tests
# =============================================================================

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable logging during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
}

# =============================================================================
# Stripe Mock Configuration
# =============================================================================

STRIPE_API_KEY = 'sk_test_dummy'
STRIPE_WEBHOOK_SECRET = 'whsec_test_secret'
STRIPE_WEBHOOK_TOLERANCE = 300

# =============================================================================
# CORS - Allow all for tests
# =============================================================================

CORS_ALLOW_ALL_ORIGINS = True
