"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping

DEFAULT_SNAPSHOT = Path("public/data/content-db.json")
DEFAULT_MODEL_BASE_URL = "https://api.deepseek.com"
DEFAULT_MODEL = "deepseek-chat"

ENV_PREFIX = "DOCASSIST_"

# Fields that can be overridden from the environment, e.g. DOCASSIST_MODEL_NAME.
_ENV_FIELDS = {
    "snapshot_path": Path,
    "search_backend": str,
    "hosted_search_url": str,
    "hosted_search_timeout": float,
    "result_limit": int,
    "max_content_chars": int,
    "model_base_url": str,
    "model_name": str,
    "request_timeout": float,
}


@dataclass(slots=True)
class AppConfig:
    snapshot_path: Path = DEFAULT_SNAPSHOT
    search_backend: Literal["json", "hosted"] = "json"
    hosted_search_url: str = "http://localhost:3000"
    hosted_search_timeout: float = 5.0
    result_limit: int = 6
    max_queries: int = 3
    max_content_chars: int = 1500
    model_base_url: str = DEFAULT_MODEL_BASE_URL
    model_name: str = DEFAULT_MODEL
    api_key: str | None = None
    request_timeout: float = 60.0

    def __post_init__(self) -> None:
        self.snapshot_path = Path(self.snapshot_path)
        if self.search_backend not in ("json", "hosted"):
            raise ValueError(f"Unknown search backend: {self.search_backend}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a config from ``DOCASSIST_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        overrides = {}
        for attr, cast in _ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + attr.upper())
            if value:
                overrides[attr] = cast(value)

        api_key = env.get(ENV_PREFIX + "API_KEY") or env.get("DEEPSEEK_API_KEY")
        return cls(api_key=api_key or None, **overrides)

    def resolve_snapshot_path(self, base_dir: Path | None = None) -> Path:
        if self.snapshot_path.is_absolute() or base_dir is None:
            return self.snapshot_path
        return base_dir / self.snapshot_path
