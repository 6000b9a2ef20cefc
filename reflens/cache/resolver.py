"""Turns a ref token back into an actionable element handle."""

from __future__ import annotations

import logging
import re
from typing import Any

from reflens.cache.ref_cache import RefCache
from reflens.core.errors import InvalidRefFormat, RefNotFound
from reflens.core.types import ElementDescriptor, SemanticDescriptor, StructuralDescriptor
from reflens.driver.base import PageDriver

logger = logging.getLogger(__name__)

_REF_RE = re.compile(r"@?(e[0-9]+)")


def parse_ref(token: str) -> str | None:
    """Return the bare ref id for "e1" / "@e1", or None when malformed."""
    if not isinstance(token, str):
        return None
    match = _REF_RE.fullmatch(token)
    return match.group(1) if match else None


class RefResolver:
    """
    Reads the cache and asks the driver for the element a ref describes.

    Only guarantees the ref existed in the last snapshot. It performs no page
    action, so an element that vanishes after resolution is the acting tool's
    problem.
    """

    async def resolve(self, driver: PageDriver, token: str, cache: RefCache) -> Any:
        ref = parse_ref(token)
        if ref is None:
            raise InvalidRefFormat(str(token))

        descriptor = cache.get(ref)
        handle = await self.locate(driver, descriptor)
        if handle is None:
            logger.warning("ref %s (%s) no longer matches any element", ref, descriptor.selector)
            raise RefNotFound(
                ref,
                cache.list_available(),
                limit=cache.max_listed_refs,
                detail=f"({descriptor.selector}) no longer matches an element on the page",
            )
        logger.debug("resolved %s via %s", ref, descriptor.kind)
        return handle

    async def locate(self, driver: PageDriver, descriptor: ElementDescriptor) -> Any | None:
        if isinstance(descriptor, StructuralDescriptor):
            return await driver.resolve_by_selector(descriptor.selector)
        if isinstance(descriptor, SemanticDescriptor):
            matches = await driver.resolve_by_role(
                descriptor.role,
                descriptor.name,
                exact=True,
                scope=descriptor.scope,
            )
            index = descriptor.nth or 0
            return matches[index] if index < len(matches) else None
        raise TypeError(f"unknown descriptor type: {type(descriptor).__name__}")
