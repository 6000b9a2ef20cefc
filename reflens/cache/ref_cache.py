"""Holds the ref table of the most recent snapshot."""

from __future__ import annotations

import logging

from reflens.core.errors import DEFAULT_LISTED_REFS, RefNotFound
from reflens.core.types import ElementDescriptor, RefTable

logger = logging.getLogger(__name__)


class RefCache:
    """
    Maps ``eN`` ref ids to element descriptors for exactly one snapshot
    generation.

    A new table fully replaces the previous one; tables are never merged.
    ``version`` counts replacements of the current table and goes back to 0
    on ``invalidate()``, so it must only be compared against the current
    value, never across an invalidation.

    The cache stores descriptors only, never live page objects, so it stays
    safe to read after the page it describes has been replaced.
    """

    def __init__(self, *, max_listed_refs: int = DEFAULT_LISTED_REFS) -> None:
        self._refs: RefTable = {}
        self._version = 0
        self.max_listed_refs = max_listed_refs

    def replace(self, table: RefTable) -> None:
        # no await between the two assignments: readers never see a mix
        self._refs = dict(table)
        self._version += 1
        logger.debug("ref cache replaced: %d refs, version %d", len(self._refs), self._version)

    def get(self, ref: str) -> ElementDescriptor:
        """Return the descriptor for a bare ref id, or raise RefNotFound."""
        try:
            return self._refs[ref]
        except KeyError:
            raise RefNotFound(ref, self.list_available(), limit=self.max_listed_refs) from None

    def is_valid(self, ref: str) -> bool:
        return ref in self._refs

    def list_available(self) -> list[str]:
        return list(self._refs)

    def ref_map(self) -> RefTable:
        return dict(self._refs)

    def invalidate(self) -> None:
        """Drop every ref (navigation / reload)."""
        self._refs = {}
        self._version = 0
        logger.debug("ref cache invalidated")

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._refs)
