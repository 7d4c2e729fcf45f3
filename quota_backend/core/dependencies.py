"""
FastAPI dependency injection module for the Survey Quota backend.

Endpoint handlers receive the settings through the SettingsDep alias, which
keeps them easy to override in tests:

    app.dependency_overrides[get_settings_dependency] = lambda: mock_settings

Services acquire their own connections from the pool in
quota_backend/core/database.py, so no per-request connection is injected.

Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints
"""

from typing import Annotated

from fastapi import Depends

from quota_backend.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================


def get_settings_dependency() -> Settings:
    """Return the Settings singleton (thin wrapper so tests can override it)."""
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
