# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Roster sources: where the initial member list comes from.

Any object with a ``load() -> list[Member]`` method can feed the
MemberDirectory. ExcelRosterSource reads the club spreadsheet; the
static source serves tests and seeding.
"""

import math
import numbers
import zipfile
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from membership.core.config import settings
from membership.core.exceptions import SourceMissing
from membership.core.logging import get_logger
from membership.models.domain import Member

logger = get_logger(__name__)

IDENTIFIER_COLUMNS = ("matricula", "Matrícula")
GIVEN_NAME_COLUMN = "Nombres"
FAMILY_NAME_COLUMN = "Apellidos"
EMAIL_COLUMN = "Correo ESPOL"
ROLE_COLUMN = "Cargo dentro del club"


class RosterSource(Protocol):
    def load(self) -> list[Member]: ...


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _text(value: Any) -> str:
    return "" if _blank(value) else str(value).strip()


def coerce_identifier(value: Any) -> Optional[int]:
    """Int from a cell that may hold 1001, 1001.0 or ' 1001 '. None if not numeric."""
    if _blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        value = float(value)
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def build_member(raw: dict[str, Any], default_role: Optional[str] = None) -> Optional[Member]:
    """Map one roster row to a Member; None when the row has no usable matrícula."""
    identifier = None
    for column in IDENTIFIER_COLUMNS:
        identifier = coerce_identifier(raw.get(column))
        if identifier is not None:
            break
    if identifier is None:
        return None

    given = _text(raw.get(GIVEN_NAME_COLUMN))
    family = _text(raw.get(FAMILY_NAME_COLUMN))
    return Member(
        identifier=identifier,
        display_name=f"{given} {family}".strip(),
        contact_email=_text(raw.get(EMAIL_COLUMN)),
        role=_text(raw.get(ROLE_COLUMN)) or default_role or settings.DEFAULT_ROLE,
    )


class StaticRosterSource:
    """Roster held in memory."""

    def __init__(self, members: Iterable[Member]) -> None:
        self._members = list(members)

    def load(self) -> list[Member]:
        return list(self._members)


class ExcelRosterSource:
    """Reads members from a named sheet of an .xlsx workbook (row 1 = headers)."""

    def __init__(self, path: str | Path, sheet: str, default_role: Optional[str] = None) -> None:
        self.path = Path(path)
        self.sheet = sheet
        self.default_role = default_role

    def _read_sheet(self) -> pd.DataFrame:
        if not self.path.is_file():
            raise SourceMissing(f"Roster file '{self.path}' does not exist")
        try:
            with pd.ExcelFile(self.path, engine="openpyxl") as book:
                if self.sheet not in book.sheet_names:
                    raise SourceMissing(
                        f"Sheet '{self.sheet}' does not exist in {self.path.name}"
                    )
                return book.parse(self.sheet, dtype=object)
        except (zipfile.BadZipFile, InvalidFileException, OSError) as e:
            raise SourceMissing(f"Roster file '{self.path}' is not a readable workbook") from e

    def load(self) -> list[Member]:
        frame = self._read_sheet()
        headers = [str(c).strip() for c in frame.columns]
        if not any(c in headers for c in IDENTIFIER_COLUMNS):
            raise SourceMissing(
                f"Sheet '{self.sheet}' has no matricula column (headers: {headers})"
            )
        frame.columns = headers

        members: list[Member] = []
        for row_number, raw in enumerate(frame.to_dict(orient="records"), start=2):
            member = build_member(raw, self.default_role)
            if member is None:
                logger.warning("Roster row %d skipped: no valid matricula", row_number)
                continue
            members.append(member)
        logger.info("Roster read: sheet=%s, members=%d", self.sheet, len(members))
        return members
