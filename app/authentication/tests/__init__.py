"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model and username validation tests
- test_managers.py: UserManager tests
- test_services.py: IdentityDirectory, AuthService, PresenceService tests
- test_views.py: Register/login API endpoint tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_models.py
"""
