"""
app/connectors package marker.
"""

from app.connectors.supabase_auth import AuthenticationError, AuthProviderError, SupabaseAuthClient

__all__ = [
    "AuthenticationError",
    "AuthProviderError",
    "SupabaseAuthClient",
]
