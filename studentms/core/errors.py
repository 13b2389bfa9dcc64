"""Authentication error taxonomy.

These never reach the client as-is: the HTTP layer turns them into a 401 or,
for the Google callback, a redirect to the failure path.
"""


class AuthError(Exception):
    """Base class for every failure inside the authentication flow."""


class AuthenticationFailure(AuthError):
    """The identity provider exchange failed or returned an unusable profile."""


class StoreFailure(AuthError):
    """The user directory was unreachable or a write could not be completed."""


class SigningFailure(AuthError):
    """A token could not be signed (usually a missing or invalid secret)."""


class SessionDeserializationFailure(AuthError):
    """A session cookie points at a user that can no longer be loaded."""
