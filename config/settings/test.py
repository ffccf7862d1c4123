"""
With these settings, tests run faster.
"""
from .base import *  # noqa: F403
from .base import env

SECRET_KEY = env("DJANGO_SECRET_KEY", default="test-secret-key-not-for-production")
TEST_RUNNER = "django.test.runner.DiscoverRunner"

DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

HUEY = {
    "huey_class": "huey.MemoryHuey",
    "name": "mindpulse-test",
    "immediate": True,
}

ASSESSMENT_APP_VERSION = "test"
ASSESSMENT_CONFIG_VERSION = "test"
ASSESSMENT_GAME_OVERRIDES = {}
