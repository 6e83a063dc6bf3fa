"""Template location and descriptor loading."""

from .meta import TemplateMeta, find_descriptor, load_meta
from .source import (
    RemoteTemplate,
    download_template,
    ensure_template_exists,
    get_cache_dir,
    is_local_template,
    resolve_local_path,
    resolve_template_repo,
)

__all__ = [
    "RemoteTemplate",
    "TemplateMeta",
    "download_template",
    "ensure_template_exists",
    "find_descriptor",
    "get_cache_dir",
    "is_local_template",
    "load_meta",
    "resolve_local_path",
    "resolve_template_repo",
]
