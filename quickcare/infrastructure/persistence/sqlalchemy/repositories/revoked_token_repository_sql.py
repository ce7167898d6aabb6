from datetime import datetime
from sqlmodel import Session

from .....db.models import RevokedToken
from .....application.ports.revoked_token_repo import RevokedTokenRepository


class SqlRevokedTokenRepository(RevokedTokenRepository):
    def __init__(self, session: Session):
        self.session = session

    def revoke(self, jti: str, user_id: str, expires_at: datetime) -> None:
        if self.session.get(RevokedToken, jti):
            return
        self.session.add(RevokedToken(jti=jti, user_id=user_id, expires_at=expires_at))
        self.session.commit()

    def is_revoked(self, jti: str) -> bool:
        return self.session.get(RevokedToken, jti) is not None
