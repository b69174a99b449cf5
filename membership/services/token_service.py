# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Session credential issue / verify.
Stateless signed JWTs binding a member identifier and role.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from membership.core.exceptions import ExpiredToken, InvalidToken
from membership.models.domain import Identity


class TokenService:
    """Issues and verifies session tokens with a process-wide secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_hours: int = 8) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(hours=ttl_hours)

    def issue(self, identifier: int, role: str, now: Optional[datetime] = None) -> str:
        """Sign {matricula, rol, iat, exp} where exp = iat + ttl."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "matricula": identifier,
            "rol": role,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        """
        Decode and check signature and expiry.
        Raises ExpiredToken past exp, InvalidToken for anything else wrong.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise ExpiredToken("Token expired")
        except JWTError:
            raise InvalidToken("Token invalid")

        identifier = payload.get("matricula")
        role = payload.get("rol")
        if isinstance(identifier, bool) or not isinstance(identifier, int):
            raise InvalidToken("Token invalid")
        if not isinstance(role, str) or not role.strip():
            raise InvalidToken("Token invalid")
        if "exp" not in payload:
            raise InvalidToken("Token invalid")
        return Identity(identifier=identifier, role=role)
