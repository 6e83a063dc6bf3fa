"""Runtime settings.

Every value can be overridden from the environment:

- ``MINT_TEMPLATE_ORG``: organisation that hosts bare-named templates.
- ``MINT_TEMPLATE_PREFIX``: repository prefix for bare-named templates.
- ``MINT_GIT_HOST``: base URL remote templates are cloned from.
- ``MINT_CACHE_DIR``: where remote templates are downloaded to.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_TEMPLATE_ORG = "ice-services"
DEFAULT_TEMPLATE_PREFIX = "moleculer-template-"
DEFAULT_GIT_HOST = "https://github.com"


@dataclass(frozen=True)
class Settings:
    template_org: str
    template_prefix: str
    git_host: str
    cache_dir: Path

    @classmethod
    def from_env(cls) -> "Settings":
        cache_dir = os.getenv("MINT_CACHE_DIR")
        return cls(
            template_org=os.getenv("MINT_TEMPLATE_ORG") or DEFAULT_TEMPLATE_ORG,
            template_prefix=os.getenv("MINT_TEMPLATE_PREFIX") or DEFAULT_TEMPLATE_PREFIX,
            git_host=(os.getenv("MINT_GIT_HOST") or DEFAULT_GIT_HOST).rstrip("/"),
            cache_dir=Path(cache_dir)
            if cache_dir
            else Path(tempfile.gettempdir()) / "moleculer-cli" / "templates",
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return settings read from the environment (memoized)."""
    return Settings.from_env()
