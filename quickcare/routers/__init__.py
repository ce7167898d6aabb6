# Routers package
from . import auth_router
from . import appointments_router
from . import hospitals_router
from . import users_router

__all__ = [
    "auth_router",
    "appointments_router",
    "hospitals_router",
    "users_router",
]
