"""JSON export and import of use case packs."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from agentprep.errors import PackFileError
from agentprep.models.pack import UseCasePack


def export_pack_json(pack: UseCasePack, output_path: Path) -> None:
    """Export a UseCasePack as JSON."""
    try:
        output_path.write_text(pack.model_dump_json(indent=2))
    except OSError as exc:
        raise PackFileError(f"Cannot write {output_path}: {exc.strerror or exc}") from exc


def load_pack_json(input_path: Path) -> UseCasePack:
    """Read a UseCasePack previously written by export_pack_json."""
    try:
        raw = input_path.read_text()
    except OSError as exc:
        raise PackFileError(f"Cannot read {input_path}: {exc.strerror or exc}") from exc
    try:
        return UseCasePack.model_validate_json(raw)
    except ValidationError as exc:
        raise PackFileError(f"{input_path} is not a valid use case pack") from exc
