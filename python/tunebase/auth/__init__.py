"""Authentication and authorization module.

This module provides:
- Token verification (Supabase JWKS verifier)
- Auth middleware for FastAPI
- The authorization guard (AccessDecision / evaluate_access)
- Identity provider clients for sign-up and sign-in

Note: Test-only verifiers are in tests/support/test_verifier.py
"""

from tunebase.auth.middleware import AuthMiddleware, Viewer, get_viewer
from tunebase.auth.permissions import (
    AccessDecision,
    enforce_access,
    evaluate_access,
    require_admin,
)
from tunebase.auth.verifier import SupabaseJwksVerifier, TokenVerifier

__all__ = [
    "AccessDecision",
    "AuthMiddleware",
    "SupabaseJwksVerifier",
    "TokenVerifier",
    "Viewer",
    "enforce_access",
    "evaluate_access",
    "get_viewer",
    "require_admin",
]
