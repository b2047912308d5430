"""
Custom user manager for username-based authentication.

Related files:
    - models.py: User model that uses this manager

Security:
    - Passwords are automatically hashed via set_password()
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model with username-based authentication.

    Usage:
        user = User.objects.create_user(username="alice", password="s3cret-pass")
        admin = User.objects.create_superuser(username="ops", password="s3cret-pass")
    """

    use_in_migrations = True

    def create_user(self, username, password=None, **extra_fields):
        """
        Create and save a regular user with the given username and password.

        Args:
            username: Unique username (required)
            password: Raw password; an unusable password is set when omitted
            **extra_fields: Additional fields to set on the user

        Raises:
            ValueError: If username is not provided
        """
        if not username:
            raise ValueError("The Username field must be set")

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(username=username, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        """Create and save a superuser with staff and superuser flags set."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(username, password, **extra_fields)
