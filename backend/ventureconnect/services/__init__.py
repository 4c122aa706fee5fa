"""
Services package for VentureConnect.
Contains the domain logic shared by the routes.
"""

__all__ = [
    "connections",      # Connection request state machine
    "messaging",        # Conversations and read state
    "oidc",             # OpenID Connect client
    "passwords",        # Password hashing
    "profile",          # Profile completion and resource grid
    "sessions",         # Server-side sessions
    "uploads",          # Avatar files
]
