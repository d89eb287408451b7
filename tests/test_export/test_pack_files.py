"""Tests for JSON and YAML pack files."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from agentprep.demo import build_demo_pack
from agentprep.errors import PackFileError
from agentprep.export import load_pack
from agentprep.export.json import export_pack_json, load_pack_json
from agentprep.export.yaml import export_pack_yaml, load_pack_yaml
from agentprep.models.pack import UseCasePack
from agentprep.scoring.compute import derive_views

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _pack() -> UseCasePack:
    pack = build_demo_pack()
    readiness, roi = derive_views(pack, now=NOW)
    return pack.model_copy(update={"readiness": readiness, "roi": roi})


def test_json_export(tmp_path: Path) -> None:
    pack = _pack()
    path = tmp_path / "pack.json"
    export_pack_json(pack, path)
    assert load_pack_json(path) == pack


def test_yaml_export(tmp_path: Path) -> None:
    pack = _pack()
    path = tmp_path / "pack.yaml"
    export_pack_yaml(pack, path)

    raw = yaml.safe_load(path.read_text())
    assert list(raw)[0] == "use_case"
    assert raw["process"]["steps"][0]["title"] == "Receive Invoice"
    assert load_pack_yaml(path) == pack


def test_load_pack_picks_format_by_suffix(tmp_path: Path) -> None:
    pack = _pack()
    export_pack_yaml(pack, tmp_path / "pack.yml")
    export_pack_json(pack, tmp_path / "pack.json")
    assert load_pack(tmp_path / "pack.yml") == pack
    assert load_pack(tmp_path / "pack.json") == pack


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PackFileError):
        load_pack(tmp_path / "absent.yaml")
    with pytest.raises(PackFileError):
        load_pack(tmp_path / "absent.json")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("use_case: [unclosed\n")
    with pytest.raises(PackFileError):
        load_pack_yaml(path)


def test_yaml_that_is_not_a_pack(tmp_path: Path) -> None:
    path = tmp_path / "other.yml"
    path.write_text("just: a mapping\n")
    with pytest.raises(PackFileError):
        load_pack(path)


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(PackFileError):
        load_pack_json(path)


def test_unwritable_destination(tmp_path: Path) -> None:
    target = tmp_path / "no" / "such" / "dir" / "pack"
    with pytest.raises(PackFileError):
        export_pack_json(_pack(), target.with_suffix(".json"))
    with pytest.raises(PackFileError):
        export_pack_yaml(_pack(), target.with_suffix(".yaml"))
