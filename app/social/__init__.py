"""
Social graph app.

This app handles:
- Friend requests (send, accept, reject)
- Symmetric friendships (stored on User.friends)
- Group membership transitions (add/remove members)
- The current user's profile view of their graph

Related apps:
    - authentication: User model and IdentityDirectory
    - chat: Group model and direct-chat lookup
"""
