"""Template descriptor loading.

A template may ship a descriptor next to its ``template/`` directory:

- ``meta.py`` exposing ``meta(context) -> dict`` (or a module-level ``META``
  dict). Being code, it can compute questions from the context and provide
  pipeline hooks.
- ``meta.yml`` / ``meta.yaml`` holding the same keys as static data (no hooks).

Recognised keys: ``questions``, ``filters``, ``completeMessage`` (or
``complete_message``) and hooks ``before`` / ``after`` / ``complete``, either
top-level or nested under ``metalsmith`` / ``pipeline``.
"""

from __future__ import annotations

import hashlib
import importlib.util
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml

from ..build.pipeline import Pipeline
from ..conditions import Condition
from ..errors import InvalidDescriptor
from ..utils.logging import get_logger

logger = get_logger(__name__)

Hook = Callable[[Pipeline], None]

META_PY = "meta.py"
META_YAML = ("meta.yml", "meta.yaml")
HOOK_SECTIONS = ("metalsmith", "pipeline")


@dataclass
class TemplateMeta:
    """Everything a template descriptor can contribute to a build."""

    questions: List[Dict[str, Any]] = field(default_factory=list)
    filters: Dict[str, Condition] = field(default_factory=dict)
    before: Optional[Hook] = None
    after: Optional[Hook] = None
    complete: Optional[Hook] = None
    complete_message: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateMeta":
        questions = data.get("questions") or []
        if not isinstance(questions, list) or not all(
            isinstance(q, dict) for q in questions
        ):
            raise InvalidDescriptor("'questions' must be a list of mappings")

        filters = data.get("filters") or {}
        if not isinstance(filters, dict):
            raise InvalidDescriptor("'filters' must map glob patterns to conditions")

        message = data.get("completeMessage", data.get("complete_message"))
        if message is not None and not isinstance(message, str):
            raise InvalidDescriptor("'completeMessage' must be a string")

        hooks: Dict[str, Any] = {}
        for section in HOOK_SECTIONS:
            nested = data.get(section)
            if isinstance(nested, Mapping):
                hooks.update(nested)
        for name in ("before", "after", "complete"):
            if name in data:
                hooks[name] = data[name]

        def hook(name: str) -> Optional[Hook]:
            fn = hooks.get(name)
            return fn if callable(fn) else None

        return cls(
            questions=list(questions),
            filters={str(k): v for k, v in filters.items()},
            before=hook("before"),
            after=hook("after"),
            complete=hook("complete"),
            complete_message=message,
        )


def _load_module(path: Path) -> Any:
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"_mint_template_meta_{digest}", path)
    if spec is None or spec.loader is None:
        raise InvalidDescriptor(f"Unable to import template descriptor {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise InvalidDescriptor(f"Error while loading {path}: {e}") from e
    return module


def _load_python_meta(path: Path, context: Mapping[str, Any]) -> Mapping[str, Any]:
    module = _load_module(path)
    factory = getattr(module, "meta", None)
    if callable(factory):
        try:
            data = factory(context)
        except Exception as e:
            raise InvalidDescriptor(f"Error while evaluating {path}: {e}") from e
    else:
        data = getattr(module, "META", None)
    if not isinstance(data, Mapping):
        raise InvalidDescriptor(
            f"{path} must define meta(context) returning a dict, or a META dict"
        )
    return data


def _load_yaml_meta(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise InvalidDescriptor(f"Unable to parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidDescriptor(f"{path} must contain a mapping")
    return data


def find_descriptor(template_root: Path) -> Optional[Path]:
    for name in (META_PY, *META_YAML):
        candidate = template_root / name
        if candidate.is_file():
            return candidate
    return None


def load_meta(template_root: Path, context: Mapping[str, Any]) -> TemplateMeta:
    """Load the template descriptor, or an empty one when there is none."""
    path = find_descriptor(template_root)
    if path is None:
        logger.debug("No descriptor in %s", template_root)
        return TemplateMeta()

    logger.debug("Loading descriptor %s", path)
    if path.suffix == ".py":
        data = _load_python_meta(path, context)
    else:
        data = _load_yaml_meta(path)
    return TemplateMeta.from_mapping(data)
