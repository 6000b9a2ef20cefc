"""Role classification used by the snapshot filters."""

from __future__ import annotations

INTERACTIVE_ROLES = frozenset({
    "button", "link", "textbox", "checkbox", "radio", "combobox",
    "listbox", "menuitem", "menuitemcheckbox", "menuitemradio", "option",
    "searchbox", "slider", "spinbutton", "switch", "tab", "treeitem",
})

# Content roles get a ref only when they carry an accessible name
CONTENT_ROLES = frozenset({
    "heading", "cell", "gridcell", "columnheader", "rowheader",
    "listitem", "article", "region", "main", "navigation",
    "complementary", "banner", "contentinfo", "form", "search",
    "feed", "figure", "img", "math", "note", "status", "timer",
    "alert", "log", "marquee", "progressbar", "meter",
})

# Containers that carry no meaning of their own when nameless
STRUCTURAL_ROLES = frozenset({
    "generic", "group", "list", "table", "row", "rowgroup",
    "menu", "toolbar", "tablist", "tabpanel", "tree", "treegrid",
    "grid", "presentation", "none", "separator", "application",
    "directory", "paragraph", "section", "Section", "LabelText",
})

DOCUMENT_ROLES = frozenset({"document", "RootWebArea"})

TEXT_ROLE = "text"


def is_addressable(role: str, name: str) -> bool:
    """Whether a semantic node deserves a ref."""
    return role in INTERACTIVE_ROLES or (role in CONTENT_ROLES and bool(name))
