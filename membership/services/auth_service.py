# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Member login and profile lookup.
"""

from membership.core.exceptions import NotFound, Unauthenticated
from membership.core.logging import get_logger
from membership.metrics.prometheus import LOGINS_TOTAL
from membership.models.domain import Identity, Member
from membership.repositories.member_repository import MemberDirectory
from membership.services.token_service import TokenService

logger = get_logger(__name__)


class AuthService:
    def __init__(self, directory: MemberDirectory, token_service: TokenService) -> None:
        self._directory = directory
        self._tokens = token_service

    def login(self, identifier: int) -> tuple[str, Member]:
        """Issue a credential for a registered matrícula. Raises Unauthenticated."""
        member = self._directory.find_by_identifier(identifier)
        if member is None:
            LOGINS_TOTAL.labels(outcome="unknown_member").inc()
            logger.warning("Login refused: not registered", extra={"matricula": identifier})
            raise Unauthenticated("Matricula not registered")
        token = self._tokens.issue(member.identifier, member.role)
        LOGINS_TOTAL.labels(outcome="success").inc()
        logger.info("Login: role=%s", member.role, extra={"matricula": member.identifier})
        return token, member

    def profile(self, identity: Identity) -> Member:
        member = self._directory.find_by_identifier(identity.identifier)
        if member is None:
            raise NotFound("Member not found")
        return member
