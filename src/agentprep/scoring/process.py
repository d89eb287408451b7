"""Process tree helpers.

Steps are stored flat with a ``parent_id`` back-reference. These helpers
rebuild the hierarchy, collect subtrees for cascading deletes, and total the
recorded handling time.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from agentprep.models.usecase import ProcessStep


class ProcessNode(BaseModel):
    step: ProcessStep
    children: list[ProcessNode] = Field(default_factory=list)


def collect_descendants(edges: Iterable[tuple[str, str | None]], root_id: str) -> list[str]:
    """Return ids of every step below ``root_id``, depth-first.

    ``edges`` yields (step_id, parent_id) pairs. The root itself is not
    included. Cycles in corrupted data are tolerated.
    """
    children: dict[str, list[str]] = {}
    for step_id, parent_id in edges:
        if parent_id is not None:
            children.setdefault(parent_id, []).append(step_id)

    collected: list[str] = []
    seen: set[str] = {root_id}
    stack = list(reversed(children.get(root_id, [])))
    while stack:
        step_id = stack.pop()
        if step_id in seen:
            continue
        seen.add(step_id)
        collected.append(step_id)
        stack.extend(reversed(children.get(step_id, [])))
    return collected


def build_process_tree(steps: list[ProcessStep]) -> list[ProcessNode]:
    """Nest a flat list of steps. Siblings are ordered by order_index.

    Steps whose parent is missing are promoted to roots so nothing is hidden.
    """
    ordered = sorted(steps, key=lambda s: (s.level, s.order_index))
    nodes = {step.id: ProcessNode(step=step) for step in ordered}
    roots: list[ProcessNode] = []
    for step in ordered:
        node = nodes[step.id]
        parent = nodes.get(step.parent_id) if step.parent_id else None
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


def total_process_time(steps: list[ProcessStep]) -> float:
    """Sum of avg_time_minutes across all steps, ignoring unrecorded ones."""
    return sum(step.avg_time_minutes or 0.0 for step in steps)
