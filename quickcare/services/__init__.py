# Services package (re-export feature modules for stable imports)
from .auth.google_service import GoogleIdentityProvider

__all__ = [
    "GoogleIdentityProvider",
]
