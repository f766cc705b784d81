"""
Test settings.

In-memory SQLite so the suite runs without a database server.
"""

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

PROVISIONING_STYTCH_PROJECT_ID = "project-test-00000000-0000-0000-0000-000000000000"
PROVISIONING_STYTCH_SECRET = "secret-test-placeholder"

LOG_JSON = False
LOG_LEVEL = "WARNING"
