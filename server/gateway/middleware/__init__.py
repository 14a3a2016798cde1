"""
Middleware module for the Chat Gateway

This module contains all middleware components including authentication.
"""

from gateway.middleware.auth import AuthenticationMiddleware

__all__ = [
    "AuthenticationMiddleware",
]
