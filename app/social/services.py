"""
Relationship graph services.

This module owns every state transition of the social graph:

Services:
    FriendshipService: friend requests and symmetric friendships
    GroupMembershipService: adding and removing group members
    ProfileService: the current user's view of their graph

Invariants:
    - Friendship is symmetric: writes go through ``User.friends``, a
      symmetrical relation, so both directions change together
    - Accepting or rejecting removes every pending request from that sender
    - Only a current participant may change a group's membership

Usage:
    from social.services import FriendshipService, GroupMembershipService

    FriendshipService.send_request(alice, "bob")
    FriendshipService.accept_request(bob, "alice")

    GroupMembershipService.add_member(alice, group.id, carol.id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from authentication.services import IdentityDirectory
from chat.models import Group
from chat.services import ConversationResolver, MessageRouter
from core.helpers import parse_uuid
from core.services import BaseService, ServiceResult
from social.models import FriendRequest

if TYPE_CHECKING:
    from authentication.models import User


class FriendshipService(BaseService):
    """
    Friend requests and friendships.

    Every operation names its target by username and fails with
    USER_NOT_FOUND when no such user exists. Successful operations return
    the target user.

    Policies:
        - Duplicate requests are stored; nothing deduplicates them
        - Accepting does not require a pending request
    """

    @classmethod
    def _resolve_other(cls, actor: User, username: str | None) -> ServiceResult[User]:
        result = IdentityDirectory.require_username(username)
        if result.success and result.data.pk == actor.pk:
            return ServiceResult.failure(
                "You cannot target yourself",
                error_code="CANNOT_TARGET_SELF",
            )
        return result

    @classmethod
    def send_request(cls, actor: User, username: str | None) -> ServiceResult[User]:
        """
        Append ``actor`` to the target's pending requests.

        Error codes:
            USER_NOT_FOUND, CANNOT_TARGET_SELF, ALREADY_FRIENDS
        """
        result = cls._resolve_other(actor, username)
        if not result.success:
            return result
        target = result.data

        if actor.is_friend_of(target):
            return ServiceResult.failure(
                f"You are already friends with {target.username}",
                error_code="ALREADY_FRIENDS",
            )

        FriendRequest.objects.create(sender=actor, recipient=target)

        cls.get_logger().info(f"User {actor.id} sent a friend request to {target.id}")
        return ServiceResult.success(target)

    @classmethod
    def remove_friend(cls, actor: User, username: str | None) -> ServiceResult[User]:
        """
        Remove the friendship in both directions.

        Succeeds even when the two were not friends.

        Error codes:
            USER_NOT_FOUND, CANNOT_TARGET_SELF
        """
        result = cls._resolve_other(actor, username)
        if not result.success:
            return result
        target = result.data

        actor.friends.remove(target)

        cls.get_logger().info(f"User {actor.id} removed friend {target.id}")
        return ServiceResult.success(target)

    @classmethod
    def accept_request(cls, actor: User, username: str | None) -> ServiceResult[User]:
        """
        Accept the target's request(s) and befriend them.

        All pending requests from the target are cleared. The friendship is
        created even when none were pending.

        Error codes:
            USER_NOT_FOUND, CANNOT_TARGET_SELF
        """
        result = cls._resolve_other(actor, username)
        if not result.success:
            return result
        target = result.data

        with cls.atomic():
            cleared, _ = FriendRequest.objects.filter(
                recipient=actor, sender=target
            ).delete()
            actor.friends.add(target)

        if not cleared:
            cls.get_logger().info(
                f"User {actor.id} accepted {target.id} without a pending request"
            )
        cls.get_logger().info(f"Users {actor.id} and {target.id} are now friends")
        return ServiceResult.success(target)

    @classmethod
    def reject_request(cls, actor: User, username: str | None) -> ServiceResult[User]:
        """
        Drop every pending request from the target. No effect on the target.

        Error codes:
            USER_NOT_FOUND, CANNOT_TARGET_SELF
        """
        result = cls._resolve_other(actor, username)
        if not result.success:
            return result
        target = result.data

        cleared, _ = FriendRequest.objects.filter(recipient=actor, sender=target).delete()

        cls.get_logger().info(
            f"User {actor.id} rejected {cleared} request(s) from {target.id}"
        )
        return ServiceResult.success(target)

    @staticmethod
    def pending_senders(user: User) -> list[User]:
        """Senders of ``user``'s pending requests, oldest first, duplicates kept."""
        return [
            request.sender
            for request in FriendRequest.objects.filter(recipient=user)
            .select_related("sender")
            .order_by("created_at", "id")
        ]

    @classmethod
    def list_relationships(cls, actor: User) -> ServiceResult[dict]:
        """
        Return the actor's friends and pending requests.

        Shape:
            {"friends": [{id, username}], "friendRequests": [{id, username}]}

        Error codes:
            USER_NOT_FOUND: The actor's record no longer exists
        """
        result = IdentityDirectory.require_id(actor.pk)
        if not result.success:
            return result
        user = result.data

        return ServiceResult.success(
            {
                "friends": IdentityDirectory.public_identities(user.friends.all()),
                "friendRequests": IdentityDirectory.public_identities(
                    cls.pending_senders(user)
                ),
            }
        )


class GroupMembershipService(BaseService):
    """
    Group membership transitions.

    The actor must already be a participant. Members are added to and
    removed from ``Group.participants``, whose reverse side is the user's
    ``chat_groups`` set, so both sides change in one write.
    """

    @classmethod
    def _load(cls, actor: User, group_id, user_id) -> ServiceResult[tuple[Group, User]]:
        pk = parse_uuid(group_id)
        group = Group.objects.filter(pk=pk).first() if pk else None
        if group is None:
            return ServiceResult.failure("Group not found", error_code="GROUP_NOT_FOUND")

        if not group.has_participant(actor):
            cls.get_logger().warning(
                f"User {actor.id} tried to change membership of group {group.id}"
            )
            return ServiceResult.failure(
                "You are not a participant in this group",
                error_code="NOT_PARTICIPANT",
            )

        if user_id in (None, ""):
            return ServiceResult.failure(
                "userId is required",
                error_code="VALIDATION_ERROR",
                errors={"userId": ["This field is required."]},
            )

        member = IdentityDirectory.require_id(user_id)
        if not member.success:
            return member
        return ServiceResult.success((group, member.data))

    @classmethod
    def add_member(cls, actor: User, group_id, user_id) -> ServiceResult[Group]:
        """
        Add ``user_id`` to the group.

        Error codes:
            GROUP_NOT_FOUND, NOT_PARTICIPANT, USER_NOT_FOUND, ALREADY_MEMBER
        """
        result = cls._load(actor, group_id, user_id)
        if not result.success:
            return result
        group, member = result.data

        if group.has_participant(member):
            return ServiceResult.failure(
                f"{member.username} is already a member of this group",
                error_code="ALREADY_MEMBER",
            )

        group.participants.add(member)

        cls.get_logger().info(f"User {actor.id} added {member.id} to group {group.id}")
        return ServiceResult.success(group)

    @classmethod
    def remove_member(cls, actor: User, group_id, user_id) -> ServiceResult[Group]:
        """
        Remove ``user_id`` from the group.

        A participant cannot remove themselves through this operation.

        Error codes:
            GROUP_NOT_FOUND, NOT_PARTICIPANT, USER_NOT_FOUND,
            CANNOT_TARGET_SELF, NOT_MEMBER
        """
        result = cls._load(actor, group_id, user_id)
        if not result.success:
            return result
        group, member = result.data

        if member.pk == actor.pk:
            return ServiceResult.failure(
                "You cannot remove yourself from a group",
                error_code="CANNOT_TARGET_SELF",
            )

        if not group.has_participant(member):
            return ServiceResult.failure(
                f"{member.username} is not a member of this group",
                error_code="NOT_MEMBER",
            )

        group.participants.remove(member)
        # Live sessions joined before the removal must stop receiving messages
        MessageRouter.revoke(member.id, group.channel_key)

        cls.get_logger().info(f"User {actor.id} removed {member.id} from group {group.id}")
        return ServiceResult.success(group)


class ProfileService(BaseService):
    """Assembles the current user's profile from the graph and conversations."""

    @classmethod
    def profile(cls, actor: User) -> ServiceResult[dict]:
        """
        Shape:
            {id, username, connected,
             friends: [{id, username, chatId}],
             friendRequests: [{id, username}],
             groups: [{id, name}]}

        ``chatId`` is the friend's direct chat with the actor, or None.
        """
        result = IdentityDirectory.require_id(actor.pk)
        if not result.success:
            return result
        user = result.data

        friends = []
        for friend in user.friends.all():
            chat = ConversationResolver.find_direct_chat(user, friend)
            friends.append(
                {
                    **IdentityDirectory.public_identity(friend),
                    "chatId": str(chat.id) if chat else None,
                }
            )

        return ServiceResult.success(
            {
                **IdentityDirectory.public_identity(user),
                "connected": user.connected,
                "friends": friends,
                "friendRequests": IdentityDirectory.public_identities(
                    FriendshipService.pending_senders(user)
                ),
                "groups": [
                    {"id": str(group.id), "name": group.name}
                    for group in user.chat_groups.order_by("created_at")
                ],
            }
        )
