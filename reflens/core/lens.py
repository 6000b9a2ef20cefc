"""RefLens — main orchestrator class."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from reflens.cache.ref_cache import RefCache
from reflens.cache.resolver import RefResolver
from reflens.core.errors import DEFAULT_LISTED_REFS, DriverUnavailable, RefLensError
from reflens.core.types import SnapshotOptions, SnapshotResult
from reflens.driver.base import PageDriver
from reflens.formatter.token_budget import TokenBudget
from reflens.snapshot.builder import SnapshotBuilder

logger = logging.getLogger(__name__)


class RefLens:
    """
    Sits between one page driver and the tools acting on that page.

    Usage:
        lens = RefLens(PlaywrightDriver(page))
        result = await lens.snapshot(interactive=True)
        # result.tree → send to LLM
        button = await lens.resolve("@e2")
        await button.click()

    The cache is the only shared state. The builder writes it, the resolver
    reads it, and nothing else receives it.
    """

    def __init__(
        self,
        driver: PageDriver,
        *,
        max_listed_refs: int = DEFAULT_LISTED_REFS,
        token_budget: int | None = None,
        invalidate_on_navigation: bool = True,
    ) -> None:
        self.driver = driver
        self.token_budget = token_budget

        self._cache = RefCache(max_listed_refs=max_listed_refs)
        # builds are published by snapshot(), not by the builder
        self._builder = SnapshotBuilder()
        self._resolver = RefResolver()
        self._budget = TokenBudget()
        # one outstanding build per page
        self._build_lock = asyncio.Lock()
        # bumped by invalidate(); a build only publishes if it is unchanged
        self._generation = 0

        if invalidate_on_navigation:
            driver.on_navigation(self.invalidate)

    async def snapshot(self, options: SnapshotOptions | None = None, **flags: Any) -> SnapshotResult:
        """
        Build a snapshot of the current page and publish its refs.

        Accepts either a SnapshotOptions or its fields as keyword flags.
        ScopeNotFound / DriverUnavailable propagate with the cache untouched.
        A navigation that lands while the tree is being read discards the
        build and raises DriverUnavailable.
        """
        if options is None:
            options = SnapshotOptions(**flags)
        elif flags:
            raise TypeError("pass either options or keyword flags, not both")

        async with self._build_lock:
            generation = self._generation
            try:
                tree, refs = await self._builder.build(self.driver, options)
                if generation != self._generation:
                    raise DriverUnavailable("page navigated during snapshot; take a new snapshot")
            except RefLensError as exc:
                logger.warning("snapshot failed: %s", exc.message)
                raise
            self._cache.replace(refs)
            version = self._cache.version

        if self.token_budget is not None:
            tree, truncated = self._budget.truncate(tree, self.token_budget)
            if truncated:
                logger.debug("snapshot tree truncated to %d tokens", self.token_budget)

        return SnapshotResult(
            tree=tree,
            refs=refs,
            version=version,
            url=self.driver.url,
            title=await self.driver.title(),
            token_count=self._budget.count(tree),
        )

    async def resolve(self, ref: str) -> Any:
        """Return an actionable handle for ``ref`` (raises InvalidRefFormat / RefNotFound)."""
        try:
            return await self._resolver.resolve(self.driver, ref, self._cache)
        except RefLensError as exc:
            logger.warning("resolve %r failed: %s", ref, exc.kind)
            raise

    def invalidate(self) -> None:
        """Forget every ref; the next snapshot starts from version 1 again."""
        self._generation += 1
        self._cache.invalidate()

    def available_refs(self) -> list[str]:
        return self._cache.list_available()

    def ref_map(self) -> dict:
        """Copy of the current ref table."""
        return self._cache.ref_map()

    @property
    def version(self) -> int:
        return self._cache.version
