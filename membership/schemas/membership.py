# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
Requests accept the front-end's Spanish field names and English ones.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from membership.models.domain import Member


# ── Auth Schemas ──

class LoginRequest(BaseModel):
    matricula: int = Field(
        ...,
        validation_alias=AliasChoices("matricula", "identifier"),
        description="Membership number",
    )

    @field_validator("matricula", mode="before")
    @classmethod
    def reject_boolean(cls, v):
        # JSON true/false would otherwise coerce to 1/0
        if isinstance(v, bool):
            raise ValueError("matricula must be a number")
        return v


class SuccessResponse(BaseModel):
    success: bool = True


class ProfileResponse(BaseModel):
    usuario: Member


# ── Event Schemas ──

class EventCreateRequest(BaseModel):
    """Field contents are checked by EventRegistry, not here."""
    name: str = Field(..., validation_alias=AliasChoices("nombre", "name"))
    description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("descripcion", "description")
    )
    time_slots: list[str] = Field(
        ..., validation_alias=AliasChoices("horarios", "timeSlots", "time_slots")
    )
    role_options: list[str] = Field(
        ..., validation_alias=AliasChoices("roles", "roleOptions", "role_options")
    )


class RegistrationRequest(BaseModel):
    time_slot: str = Field(
        ..., validation_alias=AliasChoices("horario", "timeSlot", "time_slot")
    )
    role: str = Field(..., validation_alias=AliasChoices("rol", "role"))
