# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories, services and the guard.
"""

from typing import Annotated, Optional

from fastapi import Cookie, Depends

from membership.core.config import settings
from membership.models.domain import Identity
from membership.repositories.event_repository import EventRepository
from membership.repositories.member_repository import MemberDirectory
from membership.services.access_guard import AccessGuard
from membership.services.auth_service import AuthService
from membership.services.event_service import EventRegistry
from membership.services.token_service import TokenService

# ── Singleton instances (in-memory stores) ──
_member_directory = MemberDirectory()
_event_repo = EventRepository()
_token_service = TokenService(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    ttl_hours=settings.TOKEN_TTL_HOURS,
)

# ── Service instances (with injected dependencies) ──
_access_guard = AccessGuard(_token_service)
_event_registry = EventRegistry(_event_repo)
_auth_service = AuthService(_member_directory, _token_service)


# ── FastAPI dependency functions ──
def get_member_directory() -> MemberDirectory:
    return _member_directory


def get_token_service() -> TokenService:
    return _token_service


def get_access_guard() -> AccessGuard:
    return _access_guard


def get_event_registry() -> EventRegistry:
    return _event_registry


def get_auth_service() -> AuthService:
    return _auth_service


def require_roles(*roles: str):
    """Build a dependency that admits the `token` cookie holder if their role is in roles.

    No roles means any authenticated member.
    """

    def dependency(
        token: Optional[str] = Cookie(default=None, alias=settings.COOKIE_NAME),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> Identity:
        return guard.authorize(token, roles)

    return dependency


AuthenticatedMember = Annotated[Identity, Depends(require_roles())]
PrivilegedMember = Annotated[Identity, Depends(require_roles(*settings.PRIVILEGED_ROLES))]
