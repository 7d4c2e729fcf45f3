"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- FastAPI dependency injection utilities

Re-exports the submodules' public names so callers can write:

    from quota_backend.core import get_settings, get_db_pool, SettingsDep

Usage Examples:
    # Database pool lifecycle (in FastAPI lifespan)
    from quota_backend.core import init_db, close_db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        yield
        await close_db()

    # FastAPI endpoint with settings injected
    from quota_backend.core import SettingsDep

    @router.get("/modes")
    async def list_modes(settings: SettingsDep):
        ...
"""

# =============================================================================
# Re-exports from quota_backend.core.config
# =============================================================================
from quota_backend.core.config import Settings, get_settings

# =============================================================================
# Re-exports from quota_backend.core.database
# =============================================================================
from quota_backend.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from quota_backend.core.dependencies
# =============================================================================
from quota_backend.core.dependencies import get_settings_dependency, SettingsDep

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
]
