from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from ..core.constants import DEFAULT_TOKEN_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .principal import Principal


@dataclass(frozen=True)
class TokenSettings:
    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = DEFAULT_TOKEN_MINUTES


class TokenService:
    """Issue and verify signed access tokens.

    Tokens are self-contained: there is no server-side session store, so
    logout is a client-side discard.
    """

    def __init__(self, settings: TokenSettings):
        self._settings = settings

    def issue(self, principal: Principal, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            "sub": str(principal.user_id),
            "role": principal.role.value,
            "area_id": principal.area_id,
            "username": principal.username,
            "iat": now,
            "exp": now + timedelta(minutes=int(self._settings.expire_minutes)),
            "type": "access",
        }
        return jwt.encode(claims, self._settings.secret_key, algorithm=self._settings.algorithm)

    def verify(self, token: str) -> Principal:
        try:
            claims = jwt.decode(token, self._settings.secret_key, algorithms=[self._settings.algorithm])
        except JWTError:
            raise AuthenticationError("Invalid or expired token")

        if claims.get("type") != "access":
            raise AuthenticationError("Invalid or expired token")

        try:
            area_id = claims.get("area_id")
            return Principal(
                user_id=int(claims["sub"]),
                role=Role(claims["role"]),
                area_id=int(area_id) if area_id is not None else None,
                username=str(claims.get("username") or ""),
            )
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid or expired token")
