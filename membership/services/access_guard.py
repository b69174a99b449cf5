# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Access control guard.
Turns a raw cookie token into an Identity, or refuses it.
"""

from typing import Iterable, Optional

from membership.core.exceptions import Forbidden, Unauthenticated, VerificationError
from membership.core.logging import get_logger
from membership.models.domain import Identity
from membership.services.token_service import TokenService

logger = get_logger(__name__)


class AccessGuard:
    """Role-gated precondition check for protected operations."""

    def __init__(self, token_service: TokenService) -> None:
        self._tokens = token_service

    def authorize(
        self,
        token: Optional[str],
        required_roles: Iterable[str] = (),
    ) -> Identity:
        """
        Verify the token and check its role against required_roles.
        An empty required_roles admits any authenticated identity.
        """
        if not token or not token.strip():
            raise Unauthenticated("Not authenticated")
        try:
            identity = self._tokens.verify(token)
        except VerificationError as e:
            logger.info("Rejected credential: %s", type(e).__name__)
            raise Unauthenticated("Invalid or expired token")

        roles = list(required_roles)
        if roles and not identity.has_any_role(roles):
            logger.warning(
                "Forbidden: role=%s", identity.role, extra={"matricula": identity.identifier}
            )
            raise Forbidden("Not authorized")
        return identity
