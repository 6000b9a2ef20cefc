from reflens.cache.ref_cache import RefCache
from reflens.cache.resolver import RefResolver, parse_ref
from reflens.core.errors import (
    DriverUnavailable,
    InvalidRefFormat,
    RefLensError,
    RefNotFound,
    ScopeNotFound,
)
from reflens.core.lens import RefLens
from reflens.core.logging import enable_console_logging, set_log_level
from reflens.core.types import (
    AXNode,
    CursorHint,
    ElementDescriptor,
    RefTable,
    SemanticDescriptor,
    SnapshotOptions,
    SnapshotResult,
    StructuralDescriptor,
)
from reflens.driver.base import PageDriver
from reflens.driver.playwright import PlaywrightDriver
from reflens.snapshot.builder import SnapshotBuilder

__all__ = [
    "RefLens",
    "PageDriver",
    "PlaywrightDriver",
    "SnapshotBuilder",
    "RefCache",
    "RefResolver",
    "parse_ref",
    # Types
    "AXNode",
    "CursorHint",
    "ElementDescriptor",
    "RefTable",
    "SemanticDescriptor",
    "SnapshotOptions",
    "SnapshotResult",
    "StructuralDescriptor",
    # Errors
    "DriverUnavailable",
    "InvalidRefFormat",
    "RefLensError",
    "RefNotFound",
    "ScopeNotFound",
    # Logging
    "enable_console_logging",
    "set_log_level",
]
