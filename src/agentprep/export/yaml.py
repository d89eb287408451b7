"""YAML export and import of use case packs."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from agentprep.errors import PackFileError
from agentprep.models.pack import UseCasePack


def export_pack_yaml(pack: UseCasePack, output_path: Path) -> None:
    """Export a UseCasePack as YAML."""
    data = pack.model_dump(mode="json")
    try:
        output_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
    except OSError as exc:
        raise PackFileError(f"Cannot write {output_path}: {exc.strerror or exc}") from exc


def load_pack_yaml(input_path: Path) -> UseCasePack:
    """Read a UseCasePack from a YAML file."""
    try:
        data = yaml.safe_load(input_path.read_text())
    except OSError as exc:
        raise PackFileError(f"Cannot read {input_path}: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise PackFileError(f"{input_path} is not valid YAML") from exc
    try:
        return UseCasePack.model_validate(data)
    except ValidationError as exc:
        raise PackFileError(f"{input_path} is not a use case pack") from exc
