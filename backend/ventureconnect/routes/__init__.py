"""
Routes package for API endpoints.

This package provides:
- Password and OpenID Connect authentication
- Profiles, projects, resources, skills and posts
- Connections and direct messages
- The dashboard summary
"""

__all__ = [
    "auth", "oidc", "users", "projects", "resources", "skills",
    "posts", "connections", "messages", "dashboard"
]
