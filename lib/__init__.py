# =============================================================================
# lib/ - External Service Clients
# =============================================================================
# This package contains thin wrappers around the services the backend talks to:
# - supabase_client.py: Typed Supabase wrapper for database and storage operations
# - replicate_client.py: Replicate predictions API over httpx
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.replicate_client import ReplicateClient, ReplicateError

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Replicate
    "ReplicateClient",
    "ReplicateError",
]
