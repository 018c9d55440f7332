"""Centralised settings for the schema graph tooling.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Schema sources
    # ------------------------------------------------------------------
    schema_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SCHEMA_DIR", Path.cwd() / "data" / "Generated")
        )
    )
    schema_public_prefix: str = field(
        default_factory=lambda: os.environ.get("SCHEMA_PUBLIC_PREFIX", "/data/Generated")
    )
    schema_base_url: str | None = field(
        default_factory=lambda: os.environ.get("SCHEMA_BASE_URL") or None
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )

    @property
    def index_path(self) -> Path:
        """Where ``scan`` writes the schema index by default."""
        return self.schema_dir / "schema-index.json"

    # ------------------------------------------------------------------
    # Graph building
    # ------------------------------------------------------------------
    erd_view: bool = field(default_factory=lambda: _env_flag("ERD_VIEW", "true"))

    # ------------------------------------------------------------------
    # CLI state
    # ------------------------------------------------------------------
    cli_config_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("OSDU_GRAPH_CLI_DIR", Path.home() / ".osdu_graph")
        )
    )

    # ------------------------------------------------------------------
    # Logging / API
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "WARNING").upper()
    )
    api_host: str = field(default_factory=lambda: os.environ.get("API_HOST", "127.0.0.1"))
    api_port: int = field(default_factory=lambda: int(os.environ.get("API_PORT", "8000")))


# Module-level singleton - import this everywhere:
#   from schema_graph.config import settings
settings = Settings()
