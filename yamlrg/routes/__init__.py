"""API Routes"""

from yamlrg.routes import auth, join_requests, members, notifications, users, workshops

__all__ = ["auth", "join_requests", "members", "notifications", "users", "workshops"]
