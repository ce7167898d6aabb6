# quickcare/db/models/auth/revoked_token.py
from sqlmodel import SQLModel, Field
from datetime import datetime


class RevokedToken(SQLModel, table=True):
    __tablename__ = "revoked_tokens"
    jti: str = Field(max_length=64, primary_key=True)
    user_id: str = Field(max_length=36, index=True)
    # Entries are only meaningful until the token would have expired anyway
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
