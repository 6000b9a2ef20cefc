"""TreeFormatter — renders snapshot nodes as LLM-ready text lines."""

from __future__ import annotations

from reflens.core.types import AXNode

INDENT = "  "


def _escape(name: str) -> str:
    return name.replace("\\", "\\\\").replace('"', '\\"')


class TreeFormatter:
    """
    Produces one line per surviving node::

        - heading "Welcome" [ref=e1] [level=1]
          - button "Submit" [ref=e4] [disabled]
    """

    def render_line(
        self,
        node: AXNode,
        depth: int,
        *,
        ref: str | None = None,
        role: str | None = None,
        name: str | None = None,
    ) -> str:
        """Render ``node`` at ``depth``; ``role``/``name`` override the node's own."""
        role = role or node.role
        name = node.name if name is None else name

        parts = [role]
        if name:
            parts.append(f'"{_escape(name)}"')
        if ref:
            parts.append(f"[ref={ref}]")
        parts += [f"[{attr}]" for attr in self.attributes(node)]
        return f"{INDENT * depth}- {' '.join(parts)}"

    def attributes(self, node: AXNode) -> list[str]:
        attrs: list[str] = []
        if node.level is not None:
            attrs.append(f"level={node.level}")
        if node.checked == "mixed":
            attrs.append("checked=mixed")
        elif node.checked:
            attrs.append("checked")
        if node.expanded is not None:
            attrs.append(f"expanded={'true' if node.expanded else 'false'}")
        if node.disabled:
            attrs.append("disabled")
        return attrs
