"""
VentureConnect - Backend Application

This package implements a FastAPI backend for a social network of
entrepreneurs and investors.

Core Components:
- main: FastAPI application setup, middleware and error handlers
- routes: REST API endpoints for users, projects, connections, messages and auth
- services: Sessions, OIDC, connection rules, messaging and uploads
- db: Storage interface, in-memory and SQLAlchemy backends, models and schemas
- utils: Configuration and logging

For API documentation, visit /docs when the server is running.
"""

# Version
__version__ = "1.0.0"

# Package exports
__all__ = [
    "main",           # FastAPI application
    "routes",         # API endpoints
    "services",       # Domain services
    "db",             # Storage layer
    "utils",          # Utilities
]
