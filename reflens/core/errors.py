"""Error taxonomy for snapshot construction and ref resolution.

Every error is recoverable and self-describing: the message tells an
agent-style caller what went wrong and what it can do next. ``to_dict()``
gives the structured form the tool layer forwards instead of a traceback.
"""

from __future__ import annotations

from typing import Any, Sequence

REF_PATTERN = r"^@?e\d+$"

# How many available refs a RefNotFound message enumerates by default
DEFAULT_LISTED_REFS = 10


class RefLensError(Exception):
    """Base class for all reflens errors."""

    kind = "RefLensError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message, **self.context()}


# ---------------------------------------------------------------------------
# Snapshot construction
# ---------------------------------------------------------------------------


class ScopeNotFound(RefLensError):
    kind = "ScopeNotFound"

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(
            f'Snapshot scope "{selector}" was requested but matched no elements. '
            "Check the selector or take an unscoped snapshot."
        )

    def context(self) -> dict[str, Any]:
        return {"selector": self.selector}


class DriverUnavailable(RefLensError):
    kind = "DriverUnavailable"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Page driver cannot produce an accessibility tree: {reason}")

    def context(self) -> dict[str, Any]:
        return {"reason": self.reason}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class InvalidRefFormat(RefLensError):
    kind = "InvalidRefFormat"

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(
            f'Invalid ref format: "{ref}". Refs must match {REF_PATTERN} '
            '(e.g. "e1" or "@e1").'
        )

    def context(self) -> dict[str, Any]:
        return {"ref": self.ref, "pattern": REF_PATTERN}


class RefNotFound(RefLensError):
    kind = "RefNotFound"

    def __init__(
        self,
        ref: str,
        available: Sequence[str],
        *,
        limit: int = DEFAULT_LISTED_REFS,
        detail: str | None = None,
    ) -> None:
        self.ref = ref
        self.available = list(available)
        if self.available:
            listed = ", ".join(self.available[:limit])
            if len(self.available) > limit:
                listed += ", ..."
        else:
            listed = "none"
        reason = detail or "not found in the current snapshot"
        super().__init__(
            f'Ref "{ref}" {reason}. Available refs: {listed}. '
            "Take a new snapshot to refresh refs."
        )

    def context(self) -> dict[str, Any]:
        return {"ref": self.ref, "available": self.available}
