"""Members app package.

Defines the member account (``apps.members.models.Member``, the project's
AUTH_USER_MODEL) and the narrow member store the booking engine depends on.
"""
