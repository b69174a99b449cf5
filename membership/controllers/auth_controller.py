# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Login, logout and profile.
Thin HTTP layer: delegates ALL logic to AuthService.
"""

from fastapi import APIRouter, Depends, Response

from membership.core.config import settings
from membership.core.dependencies import AuthenticatedMember, get_auth_service
from membership.schemas.membership import LoginRequest, ProfileResponse, SuccessResponse
from membership.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=SuccessResponse)
def login(
    payload: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    """Exchange a matrícula for a session cookie."""
    token, _member = service.login(payload.matricula)
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.TOKEN_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response):
    response.delete_cookie(settings.COOKIE_NAME)
    return SuccessResponse()


@router.get("/profile", response_model=ProfileResponse)
def profile(
    identity: AuthenticatedMember,
    service: AuthService = Depends(get_auth_service),
):
    """Full member record of the caller."""
    return ProfileResponse(usuario=service.profile(identity))
