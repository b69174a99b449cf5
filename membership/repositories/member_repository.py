# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Member directory.
Read-mostly index of members keyed by matrícula, filled once at startup.
"""

from typing import Iterable, Optional

from membership.core.logging import get_logger
from membership.models.domain import Member

logger = get_logger(__name__)


class MemberDirectory:
    """In-memory member index. Immutable between loads."""

    def __init__(self) -> None:
        self._index: dict[int, Member] = {}

    # ── Read ──

    def find_by_identifier(self, identifier: int) -> Optional[Member]:
        return self._index.get(identifier)

    def get_all(self) -> list[Member]:
        return list(self._index.values())

    def count(self) -> int:
        return len(self._index)

    # ── Write ──

    def load(self, source) -> list[Member]:
        """
        Pull members from a roster source and replace the index.
        Duplicate identifiers keep the first row seen.
        """
        return self.load_members(source.load())

    def load_members(self, members: Iterable[Member]) -> list[Member]:
        index: dict[int, Member] = {}
        for member in members:
            if member.identifier in index:
                logger.warning("Duplicate matricula skipped: %d", member.identifier)
                continue
            index[member.identifier] = member
        # single assignment: readers see the old or the new index, never a mix
        self._index = index
        return list(index.values())
