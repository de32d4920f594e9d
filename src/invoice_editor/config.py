"""
Environment configuration for the Invoice Editor.

Settings are read once from the process environment. Supabase credentials
select the live backend; without them the application falls back to the
in-memory demo backend so it can be run locally with no account.

Environment variables:
    SUPABASE_URL: Supabase project URL
    SUPABASE_KEY: Supabase anon key
    INVOICE_EDITOR_BACKEND: "demo" or "supabase" (overrides the default)
    INVOICE_TABLE_NAME: Table holding invoice rows (default "invoices")
    INVOICE_EDITOR_PREFS_DIR: Directory for persisted UI preferences
    INVOICE_EDITOR_PORT: Port used by app.main()
    INVOICE_EDITOR_DEMO_SEED: Seed the demo store with a sample user
    INVOICE_EDITOR_WORKSPACE_TTL: Seconds an idle session keeps its workspace
    INVOICE_EDITOR_MAX_WORKSPACES: Live workspaces kept before the oldest is closed
"""

import os
import tempfile
from dataclasses import dataclass
from functools import cache
from pathlib import Path

_TRUTHY = {"1", "true", "yes"}

DEFAULT_TABLE_NAME = "invoices"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime configuration."""

    backend: str
    supabase_url: str
    supabase_key: str
    table_name: str
    prefs_dir: Path
    port: int
    demo_seed: bool
    workspace_ttl: int = 3600
    max_workspaces: int = 256

    @property
    def use_supabase(self) -> bool:
        return self.backend == "supabase"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def read_settings() -> Settings:
    """Build Settings from the current environment."""
    url = os.getenv("SUPABASE_URL", "")
    key = os.getenv("SUPABASE_KEY", "")
    default_backend = "supabase" if url and key else "demo"
    backend = os.getenv("INVOICE_EDITOR_BACKEND", default_backend).lower()
    prefs_dir = os.getenv("INVOICE_EDITOR_PREFS_DIR") or str(
        Path(tempfile.gettempdir()) / "invoice_editor_prefs"
    )
    return Settings(
        backend=backend,
        supabase_url=url,
        supabase_key=key,
        table_name=os.getenv("INVOICE_TABLE_NAME", DEFAULT_TABLE_NAME),
        prefs_dir=Path(prefs_dir),
        port=int(os.getenv("INVOICE_EDITOR_PORT", "8000")),
        demo_seed=_flag("INVOICE_EDITOR_DEMO_SEED", "true"),
        workspace_ttl=int(os.getenv("INVOICE_EDITOR_WORKSPACE_TTL", "3600")),
        max_workspaces=int(os.getenv("INVOICE_EDITOR_MAX_WORKSPACES", "256")),
    )


@cache
def load_settings() -> Settings:
    """Return the process-wide settings (read on first use)."""
    return read_settings()
