"""Locate a template on disk, downloading remote ones first."""

from __future__ import annotations

import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..errors import DownloadFailure, FilesystemFailure, TemplateNotFound
from ..utils import console, run_git_command
from ..utils.logging import get_logger

logger = get_logger(__name__)

_LOCAL_RE = re.compile(r"^[./~]|^[a-zA-Z]:")


@dataclass(frozen=True)
class RemoteTemplate:
    """A template hosted in a git repository."""

    repo: str  # org/repo
    ref: Optional[str] = None  # branch or tag

    def __str__(self) -> str:
        return f"{self.repo}#{self.ref}" if self.ref else self.repo

    def clone_url(self, settings: Settings) -> str:
        return f"{settings.git_host}/{self.repo}.git"


def is_local_template(template_name: str) -> bool:
    """Paths start with ``.``, ``/``, ``~`` or a drive letter; anything else is remote."""
    return bool(_LOCAL_RE.match(template_name))


def resolve_local_path(template_name: str, cwd: Path) -> Path:
    path = Path(template_name).expanduser()
    if not path.is_absolute():
        path = cwd / path
    return path.resolve()


def resolve_template_repo(template_name: str, settings: Settings) -> RemoteTemplate:
    """Expand a template reference into a repository.

    ``foo`` becomes ``<org>/<prefix>foo``; ``org/repo`` is used as-is. A
    ``#ref`` suffix picks a branch or tag.
    """
    name, _, ref = template_name.partition("#")
    if "/" in name:
        repo = name
    else:
        repo = f"{settings.template_org}/{settings.template_prefix}{name}"
    return RemoteTemplate(repo=repo, ref=ref or None)


def get_cache_dir(template_name: str, settings: Settings) -> Path:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "-", template_name).strip("-")
    return settings.cache_dir / safe


def download_template(template: RemoteTemplate, dest: Path, settings: Settings) -> Path:
    """Shallow-clone ``template`` into ``dest``, replacing any previous copy."""
    try:
        if dest.exists():
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemFailure(dest, e.strerror or str(e)) from e

    cmd = ["git", "clone", "--depth", "1"]
    if template.ref:
        cmd += ["--branch", template.ref]
    cmd += [template.clone_url(settings), str(dest)]

    with console.status("[bold green]Downloading template"):
        try:
            run_git_command(cmd)
        except (subprocess.CalledProcessError, OSError) as e:
            raise DownloadFailure(str(template)) from e

    # The working tree is all we need.
    shutil.rmtree(dest / ".git", ignore_errors=True)
    logger.debug("Downloaded %s to %s", template, dest)
    return dest


def ensure_template_exists(path: Path) -> Path:
    if not path.is_dir():
        raise TemplateNotFound(path)
    return path
