"""
CDP-based accessibility tree extraction.

Playwright removed page.accessibility.snapshot() in 1.46, so the tree comes
from Accessibility.getFullAXTree (Chrome DevTools Protocol). Scoping and
cursor-interactive detection go through Runtime/DOM so every result can be
matched to AX nodes by backend DOM node id.
"""

from __future__ import annotations

import json
from typing import Any

from playwright.async_api import CDPSession

from reflens.core.errors import ScopeNotFound
from reflens.core.types import AXNode, CursorHint

_OBJECT_GROUP = "reflens"

# Internal Chrome role names → normalised role strings
_INTERNAL_ROLE_MAP: dict[str, str] = {
    "RootWebArea": "document",
    "StaticText": "text",
    "LineBreak": "text",
    "GenericContainer": "generic",
    "LayoutTable": "table",
    "LayoutTableRow": "row",
    "LayoutTableCell": "cell",
    "image": "img",  # Playwright role queries use the ARIA name
}

# Duplicates the text of their StaticText parent
_DROPPED_ROLES = frozenset({"InlineTextBox"})

# Roles with no semantic meaning, pruned when they have no name AND no children
_STRUCTURAL_ROLES = frozenset({
    "generic", "none", "presentation", "text",
    "document",   # root carries no actionable info itself
})

_FIND_CURSOR_ELEMENTS_JS = """(limit) => {
    const INTERACTIVE_TAGS = new Set([
        'A', 'BUTTON', 'INPUT', 'SELECT', 'TEXTAREA', 'SUMMARY', 'DETAILS', 'OPTION',
    ]);
    const INTERACTIVE_ROLES = new Set([
        'button', 'link', 'textbox', 'checkbox', 'radio', 'combobox',
        'listbox', 'menuitem', 'menuitemcheckbox', 'menuitemradio', 'option',
        'searchbox', 'slider', 'spinbutton', 'switch', 'tab', 'treeitem',
    ]);
    const found = [];
    if (!document.body) return found;
    for (const el of document.body.querySelectorAll('*')) {
        if (found.length >= limit) break;
        if (INTERACTIVE_TAGS.has(el.tagName)) continue;
        const role = el.getAttribute('role');
        if (role && INTERACTIVE_ROLES.has(role)) continue;

        const hasOnClick = el.hasAttribute('onclick') || typeof el.onclick === 'function';
        const tabIndex = el.getAttribute('tabindex');
        const hasTabIndex = tabIndex !== null && Number(tabIndex) >= 0;
        const pointer = getComputedStyle(el).cursor === 'pointer';
        if (!pointer && !hasOnClick && !hasTabIndex) continue;

        // cursor is inherited: only the outermost pointer element counts
        if (pointer && !hasOnClick && !hasTabIndex && el.parentElement
                && getComputedStyle(el.parentElement).cursor === 'pointer') continue;

        const rect = el.getBoundingClientRect();
        if (rect.width === 0 || rect.height === 0) continue;
        found.push(el);
    }
    return found;
}"""

_DESCRIBE_CURSOR_ELEMENTS_JS = """function () {
    function cssPath(el) {
        const parts = [];
        let node = el;
        while (node && node.nodeType === Node.ELEMENT_NODE && node !== document.documentElement) {
            if (node.id) {
                parts.unshift('#' + CSS.escape(node.id));
                break;
            }
            let nth = 1;
            let sib = node.previousElementSibling;
            while (sib) {
                if (sib.tagName === node.tagName) nth++;
                sib = sib.previousElementSibling;
            }
            parts.unshift(node.tagName.toLowerCase() + ':nth-of-type(' + nth + ')');
            node = node.parentElement;
        }
        return parts.join(' > ');
    }
    return this.map((el) => {
        const pointer = getComputedStyle(el).cursor === 'pointer';
        const hasOnClick = el.hasAttribute('onclick') || typeof el.onclick === 'function';
        return {
            selector: cssPath(el),
            role: (pointer || hasOnClick) ? 'clickable' : 'focusable',
            text: (el.textContent || '').trim().replace(/\\s+/g, ' ').slice(0, 80),
        };
    });
}"""


def _ax_value(v: dict | None) -> Any:
    """Pull the concrete value out of a CDP AXValue envelope."""
    if v is None:
        return None
    return v.get("value")


def _get_props(raw_node: dict) -> dict[str, Any]:
    """Flatten the CDP properties array into a {name: value} dict."""
    return {
        p["name"]: _ax_value(p.get("value"))
        for p in raw_node.get("properties", [])
    }


def _as_bool(raw: Any) -> bool | None:
    if raw is None:
        return None
    return (raw == "true") if isinstance(raw, str) else bool(raw)


# ---------------------------------------------------------------------------
# Live CDP queries
# ---------------------------------------------------------------------------


async def fetch_ax_tree(
    cdp: CDPSession,
    scope: str | None = None,
    *,
    cursor: bool = False,
    max_cursor_elements: int = 200,
) -> AXNode:
    """Query the page over an open CDP session and return the converted tree."""
    try:
        scope_id = await _resolve_scope(cdp, scope) if scope else None
        hints = await _collect_cursor_hints(cdp, max_cursor_elements) if cursor else {}
        result = await cdp.send("Accessibility.getFullAXTree")
    finally:
        await cdp.send("Runtime.releaseObjectGroup", {"objectGroup": _OBJECT_GROUP})

    return build_tree(result.get("nodes", []), root_backend_id=scope_id, cursor_hints=hints)


async def _resolve_scope(cdp: CDPSession, selector: str) -> int:
    """Return the backend node id of the first element matching ``selector``."""
    evaluated = await cdp.send("Runtime.evaluate", {
        "expression": f"document.querySelector({json.dumps(selector)})",
        "objectGroup": _OBJECT_GROUP,
    })
    remote = evaluated.get("result", {})
    # an invalid selector throws inside the page; it matches nothing either way
    if evaluated.get("exceptionDetails") or remote.get("subtype") != "node":
        raise ScopeNotFound(selector)
    described = await cdp.send("DOM.describeNode", {"objectId": remote["objectId"]})
    return described["node"]["backendNodeId"]


async def _collect_cursor_hints(cdp: CDPSession, limit: int) -> dict[int, CursorHint]:
    """Find cursor-interactive elements and key their hints by backend node id."""
    evaluated = await cdp.send("Runtime.evaluate", {
        "expression": f"({_FIND_CURSOR_ELEMENTS_JS})({int(limit)})",
        "objectGroup": _OBJECT_GROUP,
    })
    array_id = evaluated.get("result", {}).get("objectId")
    if evaluated.get("exceptionDetails") or not array_id:
        return {}

    described = await cdp.send("Runtime.callFunctionOn", {
        "objectId": array_id,
        "functionDeclaration": _DESCRIBE_CURSOR_ELEMENTS_JS,
        "returnByValue": True,
    })
    infos: list[dict] = described.get("result", {}).get("value") or []

    props = await cdp.send("Runtime.getProperties", {"objectId": array_id, "ownProperties": True})
    hints: dict[int, CursorHint] = {}
    for prop in props.get("result", []):
        if not prop["name"].isdigit():
            continue
        index = int(prop["name"])
        object_id = prop.get("value", {}).get("objectId")
        if object_id is None or index >= len(infos):
            continue
        node = await cdp.send("DOM.describeNode", {"objectId": object_id})
        info = infos[index]
        hints[node["node"]["backendNodeId"]] = CursorHint(
            selector=info["selector"],
            role=info["role"],
            text=info.get("text", ""),
        )
    return hints


# ---------------------------------------------------------------------------
# Pure conversion (no browser required)
# ---------------------------------------------------------------------------


def build_tree(
    nodes: list[dict],
    *,
    root_backend_id: int | None = None,
    cursor_hints: dict[int, CursorHint] | None = None,
) -> AXNode:
    hints = cursor_hints or {}
    if not nodes:
        return AXNode(node_id="root", role="document")
    by_id: dict[str, dict] = {n["nodeId"]: n for n in nodes}

    if root_backend_id is None:
        # Root = the single node with no parentId (or empty string parentId)
        root_raw = next(
            (n for n in nodes if not n.get("parentId")),
            nodes[0],
        )
    else:
        root_raw = next(
            (n for n in nodes if n.get("backendDOMNodeId") == root_backend_id),
            None,
        )
        if root_raw is None:
            # scope element exists but is not exposed to assistive technology
            return AXNode(node_id=str(root_backend_id), role="generic")

    return _convert_node(root_raw, by_id, hints)


def _convert_node(raw: dict, by_id: dict[str, dict], hints: dict[int, CursorHint]) -> AXNode:
    role_raw = raw.get("role", {})
    raw_role = role_raw.get("value", "generic") or "generic"
    role = _INTERNAL_ROLE_MAP.get(raw_role, raw_role)
    if raw.get("ignored"):
        role = "none"

    value_raw = _ax_value(raw.get("value"))
    props = _get_props(raw)

    checked_raw = props.get("checked")
    checked: bool | str | None
    if checked_raw == "mixed":
        checked = "mixed"
    else:
        checked = _as_bool(checked_raw)

    level_raw = props.get("level")
    disabled_raw = props.get("disabled")

    backend_id = raw.get("backendDOMNodeId")
    node = AXNode(
        node_id=str(backend_id if backend_id is not None else raw["nodeId"]),
        role=role,
        name=str(_ax_value(raw.get("name")) or "").strip(),
        value=str(value_raw) if value_raw is not None else "",
        level=int(level_raw) if level_raw is not None else None,
        checked=checked,
        expanded=_as_bool(props.get("expanded")),
        disabled=disabled_raw is True or disabled_raw == "true",
        cursor=hints.get(backend_id) if backend_id is not None else None,
    )

    # Ignored nodes are skipped but their children are still traversed
    for child_id in raw.get("childIds", []):
        child_raw = by_id.get(child_id)
        if child_raw is None or child_raw.get("role", {}).get("value") in _DROPPED_ROLES:
            continue
        if child_raw.get("ignored") and child_raw.get("backendDOMNodeId") not in hints:
            # Collect non-ignored descendants and attach them here
            for grandchild in _collect_unignored(child_raw, by_id, hints):
                if _is_interesting(grandchild):
                    node.children.append(grandchild)
        else:
            child_node = _convert_node(child_raw, by_id, hints)
            if _is_interesting(child_node):
                node.children.append(child_node)

    return node


def _collect_unignored(
    ignored_node: dict,
    by_id: dict[str, dict],
    hints: dict[int, CursorHint],
) -> list[AXNode]:
    """Return non-ignored descendants of an ignored node, flattened one level up."""
    result: list[AXNode] = []
    for child_id in ignored_node.get("childIds", []):
        child_raw = by_id.get(child_id)
        if child_raw is None or child_raw.get("role", {}).get("value") in _DROPPED_ROLES:
            continue
        if child_raw.get("ignored") and child_raw.get("backendDOMNodeId") not in hints:
            result.extend(_collect_unignored(child_raw, by_id, hints))
        else:
            result.append(_convert_node(child_raw, by_id, hints))
    return result


def _is_interesting(node: AXNode) -> bool:
    """
    Rough equivalent of Playwright's old interesting_only=True filter.
    Prune structural wrappers with no name and no children.
    """
    if node.cursor is not None:
        return True
    if node.role not in _STRUCTURAL_ROLES:
        return True  # any semantic role is worth keeping
    if node.name:
        return True  # has an accessible name
    if node.children:
        return True  # container for other interesting nodes
    return False
