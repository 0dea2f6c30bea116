"""Backend client factory: one SupabaseBackend (and connection pool) per process."""

from src.zp_backend.infrastructure.supabase_client import SupabaseBackend

_backend: SupabaseBackend | None = None


def get_backend() -> SupabaseBackend:
    """Get or create the shared anonymous backend client."""
    global _backend  # noqa: PLW0603
    if _backend is None:
        _backend = SupabaseBackend.from_settings()
    return _backend


async def close_backend() -> None:
    """Close the shared connection pool."""
    global _backend  # noqa: PLW0603
    if _backend is not None:
        await _backend.close()
        _backend = None
