"""
FastAPI dependency injection.

Dependencies provide instances of services and configuration to route
handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be swapped for testing
- Configuration is centralized

Everything with a lifecycle (store client, access layer, post register)
is created in the application lifespan and kept on app.state. The
dependencies below only hand those instances out, so two app instances
never share state.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..config.settings import Settings
from ..core.objects.access import ObjectAccessLayer
from ..core.posts.register import PostRegister


def get_app_settings(request: Request) -> Settings:
    """Provide the settings the application was created with."""
    return request.app.state.settings


def get_access_layer(request: Request) -> ObjectAccessLayer:
    """
    Provide the shared object access layer.

    The access layer is stateless apart from its store client, so one
    instance serves every request.
    """
    return request.app.state.access_layer


def get_post_register(request: Request) -> PostRegister:
    """Provide the application's post register."""
    return request.app.state.post_register


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
AccessLayerDep = Annotated[ObjectAccessLayer, Depends(get_access_layer)]
PostRegisterDep = Annotated[PostRegister, Depends(get_post_register)]
