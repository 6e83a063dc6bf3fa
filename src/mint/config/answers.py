"""Pre-supplied answers for non-interactive runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import FilesystemFailure, MintError


def load_answers(path: Path) -> Dict[str, Any]:
    """Load question answers from a YAML (or JSON) file."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise FilesystemFailure(path, e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise MintError(f"Unable to parse answers file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise MintError(f"Answers file '{path}' must contain a mapping")
    return {str(k): v for k, v in data.items()}
