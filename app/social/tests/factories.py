"""
Factory Boy factories for social models.

Usage:
    from social.tests.factories import FriendRequestFactory

    FriendRequestFactory(sender=alice, recipient=bob)
"""

import factory

from authentication.tests.factories import UserFactory
from social.models import FriendRequest


class FriendRequestFactory(factory.django.DjangoModelFactory):
    """Factory for a pending FriendRequest between two fresh users."""

    class Meta:
        model = FriendRequest

    sender = factory.SubFactory(UserFactory)
    recipient = factory.SubFactory(UserFactory)
