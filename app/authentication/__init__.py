"""
Authentication application.

This app provides user accounts, registration, JWT login and the
identity lookups every other app relies on.

Key components:
    - User model: Username-based account with ``connected`` flag and friends
    - IdentityDirectory: Lookups by ID/username, public identity projection
    - AuthService: Registration, login and token validation
    - PresenceService: Realtime ``connected`` bookkeeping

Usage:
    from authentication.models import User
    from authentication.services import AuthService, IdentityDirectory
"""
