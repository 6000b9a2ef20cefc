"""Filtered a11y tree text plus a fresh ref table, built in one pass."""

from __future__ import annotations

import logging
from collections import Counter

from reflens.cache.ref_cache import RefCache
from reflens.core.types import (
    AXNode,
    ElementDescriptor,
    RefTable,
    SemanticDescriptor,
    SnapshotOptions,
    StructuralDescriptor,
)
from reflens.driver.base import PageDriver
from reflens.formatter.formatter import INDENT, TreeFormatter
from reflens.snapshot.roles import (
    DOCUMENT_ROLES,
    INTERACTIVE_ROLES,
    STRUCTURAL_ROLES,
    TEXT_ROLE,
    is_addressable,
)

logger = logging.getLogger(__name__)

_EMPTY_ROLES = frozenset({"none", "presentation"})


def _ordinal_key(node: AXNode) -> tuple[str, str]:
    # a nameless role query matches every element of that role
    return (node.role, node.name)


def compute_ordinals(root: AXNode) -> dict[int, int]:
    """
    Map id(node) -> zero-based ordinal among nodes a role query would return
    together, in document order. Only keys occurring more than once get one.
    """
    nodes: list[AXNode] = []
    seen: set[str] = set()
    for n in root.walk():
        if n.role in DOCUMENT_ROLES or n.node_id in seen:
            continue
        seen.add(n.node_id)
        nodes.append(n)

    named = Counter(_ordinal_key(n) for n in nodes if n.name)
    by_role = Counter(n.role for n in nodes)

    seen_named: Counter[tuple[str, str]] = Counter()
    seen_role: Counter[str] = Counter()
    ordinals: dict[int, int] = {}
    for node in nodes:
        if node.name:
            key = _ordinal_key(node)
            if named[key] > 1:
                ordinals[id(node)] = seen_named[key]
            seen_named[key] += 1
        elif by_role[node.role] > 1:
            ordinals[id(node)] = seen_role[node.role]
        seen_role[node.role] += 1
    return ordinals


class _Walk:
    """Mutable state of one build call."""

    def __init__(self, options: SnapshotOptions, ordinals: dict[int, int]) -> None:
        self.options = options
        self.ordinals = ordinals
        self.counter = 0
        self.table: RefTable = {}
        self.lines: list[str] = []
        self.seen: set[str] = set()

    def next_ref(self) -> str:
        self.counter += 1
        return f"e{self.counter}"


class SnapshotBuilder:
    """
    Walks the driver's accessibility tree depth-first, pre-order, applies the
    filter policy and assigns dense refs e1..eN.

    When given a cache, the finished table is published into it only after
    the whole build succeeded; a failed or cancelled build leaves the
    previous table in place.
    """

    def __init__(self, cache: RefCache | None = None) -> None:
        self._cache = cache
        self._formatter = TreeFormatter()

    async def build(self, driver: PageDriver, options: SnapshotOptions | None = None) -> tuple[str, RefTable]:
        options = options or SnapshotOptions()
        root = await driver.query_tree(options.selector, cursor=options.cursor)

        tree, table = self.render(root, options)
        if self._cache is not None:
            self._cache.replace(table)
        logger.debug(
            "snapshot built: %d refs, %d lines (scope=%s)",
            len(table), tree.count("\n") + 1 if tree else 0, options.selector,
        )
        return tree, table

    def render(self, root: AXNode, options: SnapshotOptions) -> tuple[str, RefTable]:
        """Pure part of build(): filter, assign refs and render ``root``."""
        walk = _Walk(options, compute_ordinals(root))
        if root.role in DOCUMENT_ROLES:
            for child in root.children:
                self._visit(walk, child, depth=0, indent=0, parent_name=root.name)
        else:
            self._visit(walk, root, depth=0, indent=0, parent_name="")
        return "\n".join(walk.lines), walk.table

    def _visit(self, walk: _Walk, node: AXNode, *, depth: int, indent: int, parent_name: str) -> None:
        options = walk.options
        if options.max_depth is not None and depth > options.max_depth:
            return
        if node.node_id in walk.seen:
            return
        walk.seen.add(node.node_id)

        label = node.name
        if not label and options.cursor and node.cursor is not None:
            label = node.cursor.text

        if not self._survives(node, options, parent_name):
            for child in node.children:
                self._visit(walk, child, depth=depth + 1, indent=indent, parent_name=label)
            return

        head = len(walk.lines)
        self._emit(walk, node, indent)
        branches = 0
        for child in node.children:
            before = len(walk.lines)
            self._visit(walk, child, depth=depth + 1, indent=indent + 1, parent_name=label)
            branches += len(walk.lines) > before

        if branches < 2 and self._collapsible(node, options):
            # one path (or nothing) below: the container line is noise
            del walk.lines[head]
            walk.lines[head:] = [line[len(INDENT):] for line in walk.lines[head:]]

    def _collapsible(self, node: AXNode, options: SnapshotOptions) -> bool:
        if not options.compact or node.name or node.role not in STRUCTURAL_ROLES:
            return False
        return not (options.cursor and node.cursor is not None)

    def _survives(self, node: AXNode, options: SnapshotOptions, parent_name: str) -> bool:
        if options.cursor and node.cursor is not None:
            return True
        if node.role == TEXT_ROLE:
            # text repeating its parent's name is already on the parent's line
            return (
                not options.interactive
                and not options.compact
                and bool(node.name)
                and node.name != parent_name
            )
        if options.interactive:
            return node.role in INTERACTIVE_ROLES
        return not (node.role in _EMPTY_ROLES and not node.name)

    def _emit(self, walk: _Walk, node: AXNode, indent: int) -> None:
        descriptor = self._describe(walk, node)
        if descriptor is None:
            walk.lines.append(self._formatter.render_line(node, indent))
            return

        ref = walk.next_ref()
        walk.table[ref] = descriptor
        walk.lines.append(
            self._formatter.render_line(
                node,
                indent,
                ref=ref,
                role=descriptor.role,
                name=descriptor.name or "",
            )
        )

    def _describe(self, walk: _Walk, node: AXNode) -> ElementDescriptor | None:
        if walk.options.cursor and node.cursor is not None:
            hint = node.cursor
            return StructuralDescriptor(
                selector=hint.selector,
                role=hint.role,
                name=node.name or hint.text or None,
            )
        if not is_addressable(node.role, node.name):
            return None
        return SemanticDescriptor(
            role=node.role,
            name=node.name or None,
            nth=walk.ordinals.get(id(node)),
            scope=walk.options.selector,
        )
