"""Tests for the process tree helpers."""

from agentprep.models.usecase import ProcessStep
from agentprep.scoring.process import build_process_tree, collect_descendants, total_process_time


def _step(step_id: str, parent_id: str | None = None, **kwargs: object) -> ProcessStep:
    data: dict[str, object] = {
        "id": step_id,
        "use_case_id": "uc-1",
        "title": step_id.upper(),
        "parent_id": parent_id,
        "level": 1 if parent_id is None else 2,
    }
    data.update(kwargs)
    return ProcessStep.model_validate(data)


class TestBuildProcessTree:
    def test_nests_children_under_parents(self) -> None:
        roots = build_process_tree(
            [
                _step("receive", order_index=1),
                _step("extract", "receive", order_index=1),
                _step("match", order_index=2),
            ]
        )
        assert [node.step.id for node in roots] == ["receive", "match"]
        assert [child.step.id for child in roots[0].children] == ["extract"]
        assert roots[1].children == []

    def test_siblings_follow_order_index(self) -> None:
        roots = build_process_tree(
            [_step("c", order_index=3), _step("a", order_index=1), _step("b", order_index=2)]
        )
        assert [node.step.id for node in roots] == ["a", "b", "c"]

    def test_orphans_become_roots(self) -> None:
        roots = build_process_tree([_step("lost", "gone")])
        assert [node.step.id for node in roots] == ["lost"]

    def test_empty(self) -> None:
        assert build_process_tree([]) == []


class TestCollectDescendants:
    def test_depth_first_excluding_root(self) -> None:
        edges = [("a", None), ("b", "a"), ("c", "b"), ("d", "a"), ("e", None)]
        assert collect_descendants(edges, "a") == ["b", "c", "d"]

    def test_leaf_has_no_descendants(self) -> None:
        assert collect_descendants([("a", None), ("b", "a")], "b") == []

    def test_tolerates_cycles(self) -> None:
        edges = [("a", "c"), ("b", "a"), ("c", "b")]
        assert sorted(collect_descendants(edges, "a")) == ["b", "c"]


def test_total_process_time_skips_unrecorded_steps() -> None:
    steps = [
        _step("a", avg_time_minutes=2),
        _step("b", avg_time_minutes=5.5),
        _step("c"),
    ]
    assert total_process_time(steps) == 7.5
