"""Derived-Metrics Calculator and process tree helpers."""

from agentprep.scoring.compute import (
    completion_ratio,
    compute_readiness,
    compute_roi,
    derive_views,
    missing_sections,
    snapshot_from_pack,
)
from agentprep.scoring.process import (
    ProcessNode,
    build_process_tree,
    collect_descendants,
    total_process_time,
)

__all__ = [
    "ProcessNode",
    "build_process_tree",
    "collect_descendants",
    "completion_ratio",
    "compute_readiness",
    "compute_roi",
    "derive_views",
    "missing_sections",
    "snapshot_from_pack",
    "total_process_time",
]
