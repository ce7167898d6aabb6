from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class FederatedIdentity:
    subject: str
    email: Optional[str]
    name: Optional[str]
    picture: Optional[str]


class IdentityProvider(Protocol):
    async def verify(self, credential: str) -> Optional[FederatedIdentity]:
        """Return the identity behind a credential, or None when it does not verify."""
        ...
