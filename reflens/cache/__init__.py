from reflens.cache.ref_cache import RefCache
from reflens.cache.resolver import RefResolver, parse_ref

__all__ = ["RefCache", "RefResolver", "parse_ref"]
