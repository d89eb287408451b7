"""Pack file export and import."""

from __future__ import annotations

from pathlib import Path

from agentprep.export.json import export_pack_json, load_pack_json
from agentprep.export.yaml import export_pack_yaml, load_pack_yaml
from agentprep.models.pack import UseCasePack

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_pack(path: Path) -> UseCasePack:
    """Read a pack, choosing the format from the file suffix (JSON by default)."""
    if path.suffix.lower() in _YAML_SUFFIXES:
        return load_pack_yaml(path)
    return load_pack_json(path)


__all__ = [
    "export_pack_json",
    "export_pack_yaml",
    "load_pack",
    "load_pack_json",
    "load_pack_yaml",
]
