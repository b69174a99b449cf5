# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
Field aliases are the wire names the front-end already speaks.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


def normalize_role(role: str) -> str:
    """Canonical form for role comparison: collapsed whitespace, casefolded."""
    return " ".join(str(role).split()).casefold()


class Member(BaseModel):
    """A club member loaded from the roster. Never mutated after load."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identifier: int = Field(..., alias="matricula")
    display_name: str = Field(..., alias="nombre")
    contact_email: str = Field(default="", alias="correo")
    role: str = Field(..., min_length=1, alias="rol")


class Registration(BaseModel):
    """A member's claim on one (time slot, role) pair of an event."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    member_identifier: int = Field(..., alias="matricula")
    role: str = Field(..., alias="rol")
    time_slot: str = Field(..., alias="horario")

    def key(self) -> tuple[int, str, str]:
        return (self.member_identifier, self.time_slot, self.role)


class Event(BaseModel):
    """An event members can sign up for. Registrations are append-only."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(..., alias="nombre")
    description: str = Field(default="", alias="descripcion")
    time_slots: list[str] = Field(..., alias="horarios")
    role_options: list[str] = Field(..., alias="roles")
    registrations: list[Registration] = Field(
        default_factory=list, alias="inscripciones"
    )

    def has_registration(self, registration: Registration) -> bool:
        return any(r.key() == registration.key() for r in self.registrations)


@dataclass(frozen=True)
class Identity:
    """Decoded credential: who is calling and with which role."""
    identifier: int
    role: str

    def has_any_role(self, roles) -> bool:
        wanted = {normalize_role(r) for r in roles}
        return normalize_role(self.role) in wanted
