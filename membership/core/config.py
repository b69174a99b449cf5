# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven.
Single source of truth for every tunable parameter.
"""

import os

INSECURE_DEFAULT_SECRET = "change-this-secret"


def _split(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "membership-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_HOST: str = os.getenv("SERVICE_HOST", "0.0.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", os.getenv("PORT", "3000")))

    # Credentials
    JWT_SECRET: str = os.getenv("JWT_SECRET", "") or INSECURE_DEFAULT_SECRET
    JWT_SECRET_IS_DEFAULT: bool = JWT_SECRET == INSECURE_DEFAULT_SECRET
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    TOKEN_TTL_HOURS: int = int(os.getenv("TOKEN_TTL_HOURS", "8"))
    COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"

    # Roles
    DEFAULT_ROLE: str = os.getenv("DEFAULT_ROLE", "Member")
    PRIVILEGED_ROLES: list[str] = _split(
        os.getenv("PRIVILEGED_ROLES", "President,Vice-President")
    )

    # Roster
    ROSTER_PATH: str = os.getenv("ROSTER_PATH", "members.xlsx")
    ROSTER_SHEET: str = os.getenv("ROSTER_SHEET", "Miembros")

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
