"""Shared types and dataclasses for reflens."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

CursorRole = Literal["clickable", "focusable"]

# Sentinel roles for elements surfaced through cursor-interactivity
CURSOR_ROLES: frozenset[str] = frozenset({"clickable", "focusable"})


@dataclass(frozen=True)
class CursorHint:
    """Marks a DOM element that is clickable/focusable without a semantic role."""

    selector: str  # structural CSS path, unique at query time
    role: CursorRole
    text: str = ""  # trimmed textContent, used when the a11y name is empty


@dataclass
class AXNode:
    """A single node of the accessibility tree as returned by a PageDriver."""

    node_id: str  # identity of the physical element within one query
    role: str  # ARIA role (button, link, heading, generic, ...)
    name: str = ""  # accessible name
    value: str = ""
    level: int | None = None  # headings
    checked: bool | str | None = None  # True / False / "mixed"
    expanded: bool | None = None
    disabled: bool = False
    cursor: CursorHint | None = None  # set only when cursor detection ran
    children: list[AXNode] = field(default_factory=list)

    def walk(self) -> list[AXNode]:
        """Return this node and all descendants in pre-order."""
        result: list[AXNode] = []
        stack = [self]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result


# ---------------------------------------------------------------------------
# Element descriptors
# ---------------------------------------------------------------------------


def _quote(text: str) -> str:
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


@dataclass(frozen=True)
class SemanticDescriptor:
    """Re-locates an element by ARIA role + accessible name (+ ordinal)."""

    role: str
    name: str | None = None
    nth: int | None = None  # zero-based, only set for duplicate role/name pairs
    scope: str | None = None  # CSS selector the snapshot was scoped to

    kind: Literal["semantic"] = field(default="semantic", init=False)

    @property
    def selector(self) -> str:
        if self.name:
            text = f"getByRole({_quote(self.role)}, {{ name: {_quote(self.name)}, exact: true }})"
        else:
            text = f"getByRole({_quote(self.role)})"
        if self.scope:
            text = f"locator({_quote(self.scope)}).{text}"
        if self.nth is not None:
            text += f".nth({self.nth})"
        return text

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "selector": self.selector, "role": self.role}
        if self.name:
            data["name"] = self.name
        if self.nth is not None:
            data["nth"] = self.nth
        return data


@dataclass(frozen=True)
class StructuralDescriptor:
    """Re-locates a cursor-interactive element by its raw CSS path."""

    selector: str
    role: CursorRole
    name: str | None = None  # trimmed text content, informational only

    kind: Literal["structural"] = field(default="structural", init=False)

    @property
    def nth(self) -> None:
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "selector": self.selector, "role": self.role}
        if self.name:
            data["name"] = self.name
        return data


ElementDescriptor = SemanticDescriptor | StructuralDescriptor

# ref id ("e1", "e2", ...) -> descriptor, in tree pre-order
RefTable = dict[str, ElementDescriptor]


# ---------------------------------------------------------------------------
# Snapshot options / result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SnapshotOptions:
    """Filter policy for one snapshot build."""

    interactive: bool = False  # only interactive roles
    compact: bool = False  # drop nameless structural containers
    cursor: bool = False  # surface cursor-interactive elements
    max_depth: int | None = None  # 0 = top level only
    selector: str | None = None  # CSS scope

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")

    @classmethod
    def from_args(cls, args: dict[str, Any] | None) -> SnapshotOptions:
        """Build options from tool-call arguments (``maxDepth`` camelCase accepted)."""
        args = args or {}
        max_depth = args.get("maxDepth", args.get("max_depth"))
        if max_depth is not None:
            if isinstance(max_depth, bool) or not isinstance(max_depth, (int, float)):
                raise ValueError(f"maxDepth must be a non-negative integer, got {max_depth!r}")
            if isinstance(max_depth, float):
                if not max_depth.is_integer():
                    raise ValueError(f"maxDepth must be a non-negative integer, got {max_depth!r}")
                max_depth = int(max_depth)
        selector = args.get("selector") or None
        return cls(
            interactive=bool(args.get("interactive", False)),
            compact=bool(args.get("compact", False)),
            cursor=bool(args.get("cursor", False)),
            max_depth=max_depth,
            selector=selector,
        )


@dataclass
class SnapshotResult:
    """What RefLens returns to the tool layer after snapshot()."""

    tree: str  # LLM-ready text tree with [ref=eN] markers
    refs: RefTable
    version: int  # cache version after this snapshot was published
    url: str = ""
    title: str = ""
    token_count: int = 0  # tokens in ``tree``

    @property
    def ref_count(self) -> int:
        return len(self.refs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree": self.tree,
            "refs": {ref: desc.to_dict() for ref, desc in self.refs.items()},
            "version": self.version,
            "url": self.url,
            "title": self.title,
            "refCount": self.ref_count,
        }
