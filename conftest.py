"""
Root pytest configuration for the Django project.

This module points Django at the test environment before settings are
loaded. Settings overrides and project-wide fixtures live in app/conftest.py;
app-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import django

# Test environment: SQLite, in-memory channel layer, no external services.
# setdefault keeps anything exported by the caller (e.g. a Postgres DATABASE_URL).
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DEBUG", "False")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("CHANNEL_LAYER_BACKEND", "memory")
os.environ.setdefault("LOG_FILE_NAME", "test.log")
os.environ.setdefault("ALLOWED_HOSTS", "testserver,localhost")
os.environ.setdefault("SECURE_SSL_REDIRECT", "False")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()
