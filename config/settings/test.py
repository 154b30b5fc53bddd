"""
With these settings, tests run faster.
"""

import os

# Test-safe Stripe values; provider calls are mocked in every test.
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy_test_key_for_testing")
os.environ.setdefault("STRIPE_PUBLIC_KEY", "pk_test_dummy_test_key_for_testing")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_dummy_test_secret")

from .base import *  # noqa: F403
from .base import BASE_DIR
from .base import DATABASES
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="p2Vq7oWm4kXcN9rTb1LzHs8aYdE3fUjG6iQwR0tZnMyBvCxKlPeJhDgFoSuIa5",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#test-runner
TEST_RUNNER = "django.test.runner.DiscoverRunner"
DATABASES["default"]["CONN_MAX_AGE"] = 0  # type: ignore[name-defined]
if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    # Threaded tests need file locking; in-memory SQLite fails concurrent writers.
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# PASSWORDS
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#password-hashers
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# CACHES
# ------------------------------------------------------------------------------
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "",
    },
}
