from typing import Protocol
from datetime import datetime


class RevokedTokenRepository(Protocol):
    def revoke(self, jti: str, user_id: str, expires_at: datetime) -> None:
        ...

    def is_revoked(self, jti: str) -> bool:
        ...
