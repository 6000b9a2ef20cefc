from reflens.snapshot.builder import SnapshotBuilder, compute_ordinals

__all__ = ["SnapshotBuilder", "compute_ordinals"]
