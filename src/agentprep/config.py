"""Runtime settings, read from AGENTPREP_* environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

DEFAULT_DB = Path(".agentprep") / "agentprep.db"


class Settings(BaseModel):
    """Where the stores live and how the CLI behaves.

    api_url unset means local-only: the fallback store serves every call.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str | None = None
    api_prefix: str = "/api/use-cases"
    db_path: Path = DEFAULT_DB
    timeout: float = 10.0
    owner_id: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get("AGENTPREP_API_URL"):
            values["api_url"] = env["AGENTPREP_API_URL"]
        if env.get("AGENTPREP_API_PREFIX"):
            values["api_prefix"] = env["AGENTPREP_API_PREFIX"]
        if env.get("AGENTPREP_DB"):
            values["db_path"] = Path(env["AGENTPREP_DB"])
        if env.get("AGENTPREP_TIMEOUT"):
            values["timeout"] = float(env["AGENTPREP_TIMEOUT"])
        if env.get("AGENTPREP_OWNER"):
            values["owner_id"] = env["AGENTPREP_OWNER"]
        if env.get("AGENTPREP_LOG_LEVEL"):
            values["log_level"] = env["AGENTPREP_LOG_LEVEL"].upper()
        return cls(**values)

    def with_overrides(self, **overrides: object) -> Settings:
        """Copy with every non-None override applied."""
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})
