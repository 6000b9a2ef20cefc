"""Abstract page driver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from reflens.core.types import AXNode


class PageDriver(ABC):
    """
    The browser capability the ref system is built on.

    A driver produces accessibility trees and turns role/name queries or raw
    selectors back into actionable handles. It never touches the ref cache.
    """

    @property
    @abstractmethod
    def url(self) -> str: ...

    @abstractmethod
    async def title(self) -> str: ...

    @abstractmethod
    async def query_tree(self, scope: str | None = None, *, cursor: bool = False) -> AXNode:
        """
        Return the accessibility tree of the document, or of the subtree rooted
        at the first element matching ``scope``.

        Raises ScopeNotFound when ``scope`` matches nothing and
        DriverUnavailable when no tree can be produced.
        """

    @abstractmethod
    async def resolve_by_role(
        self,
        role: str,
        name: str | None = None,
        *,
        exact: bool = True,
        scope: str | None = None,
    ) -> list[Any]:
        """Return handles matching role (and name) in document order."""

    @abstractmethod
    async def resolve_by_selector(self, selector: str) -> Any | None:
        """Return a handle for the first element matching ``selector``, or None."""

    def on_navigation(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run whenever the document is replaced."""
