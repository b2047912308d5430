"""
Tests for social app.

- test_services.py: FriendshipService, GroupMembershipService, ProfileService tests
- test_views.py: Friends and profile API endpoint tests
"""
