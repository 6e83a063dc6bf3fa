"""The ``init`` command: create a project from a template.

Stages run strictly one after another, each mutating the same
:class:`BuildContext`:

1. resolve the project name and destination
2. locate (and download) the template
3. load the template descriptor and ask its questions
4. check / create the destination directory
5. build: read, ``before`` hook, filter, render, ``after`` hook, write,
   ``complete`` hook
6. optionally install dependencies
7. print the completion message

Any exception stops the remaining stages.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Mapping, Optional

import click

from .build import Pipeline, filter_files_plugin, render_string, render_template_plugin
from .config import Settings, get_settings
from .context import BuildContext
from .errors import FilesystemFailure, MintError, RenderFailure, UserDeclined
from .prompts import ask_questions
from .templates import (
    TemplateMeta,
    download_template,
    ensure_template_exists,
    get_cache_dir,
    is_local_template,
    load_meta,
    resolve_local_path,
    resolve_template_repo,
)
from .utils import console, run
from .utils.logging import get_logger

logger = get_logger(__name__)

TEMPLATE_SOURCE_DIR = "template"

# Set by the resolve and locate stages; an answers file may not override them.
RESERVED_KEYS = frozenset(
    {"template_name", "template_repo", "project_name", "project_path", "in_place", "tmp"}
)


def resolve_project(ctx: BuildContext, cwd: Path) -> None:
    """Fill ``project_name``, ``project_path`` and ``in_place``."""
    name = ctx.get("project_name")
    if not name or name == ".":
        ctx["in_place"] = True
        ctx["project_name"] = cwd.name
        ctx["project_path"] = str(cwd)
    else:
        ctx["in_place"] = False
        ctx["project_path"] = str((cwd / str(name)).resolve())


def locate_template(ctx: BuildContext, settings: Settings, cwd: Path) -> Path:
    """Point ``tmp`` at a local copy of the template, downloading it if needed."""
    template_name = ctx.template_name
    if is_local_template(template_name):
        path = resolve_local_path(template_name, cwd)
        console.print(f"Local template: {path}")
        ensure_template_exists(path)
    else:
        remote = resolve_template_repo(template_name, settings)
        ctx["template_repo"] = str(remote)
        console.print(f"Template repo: {remote}")
        path = download_template(remote, get_cache_dir(template_name, settings), settings)
    ctx["tmp"] = str(path)
    return path


def load_template_meta(
    ctx: BuildContext, preset: Optional[Mapping[str, Any]] = None
) -> TemplateMeta:
    """Load the descriptor and merge the answers to its questions into ``ctx``."""
    meta = load_meta(ctx.template_path, ctx)
    if preset:
        ignored = sorted(RESERVED_KEYS.intersection(preset))
        if ignored:
            logger.warning("Ignoring reserved keys in answers: %s", ", ".join(ignored))
        preset = {k: v for k, v in preset.items() if k not in RESERVED_KEYS}
        ctx.update(preset)
    if meta.questions:
        ctx.update(ask_questions(meta.questions, ctx, preset))
    return meta


def check_destination(ctx: BuildContext) -> None:
    """Confirm before reusing an existing directory, otherwise create it."""
    path = ctx.project_path
    if path.exists():
        if ctx.in_place and path.is_dir() and not any(path.iterdir()):
            return
        proceed = click.confirm(
            click.style(
                f"The '{ctx.project_name}' directory already exists! Continue?",
                fg="yellow",
                bold=True,
            ),
            default=False,
        )
        if not proceed:
            raise UserDeclined(f"Not overwriting '{path}'")
        return

    console.print(f"Create '{ctx.project_name}' folder...")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemFailure(path, e.strerror or str(e)) from e


def build_project(ctx: BuildContext, meta: TemplateMeta) -> Pipeline:
    """Generate the project files into ``ctx.project_path``."""
    pipeline = Pipeline(ctx.template_path)
    pipeline.metadata(ctx)

    if meta.before:
        meta.before(pipeline)

    pipeline.use(filter_files_plugin(meta.filters)).use(render_template_plugin)

    if meta.after:
        meta.after(pipeline)

    pipeline.clean(False).source(TEMPLATE_SOURCE_DIR).destination(ctx.project_path)
    with console.status("[bold green]Generating project"):
        files = pipeline.build()
    logger.debug("Generated %d files", len(files))

    if meta.complete:
        meta.complete(pipeline)
    return pipeline


def install_dependencies(ctx: BuildContext, install: Optional[bool] = None) -> bool:
    """Run ``npm install`` in the project, asking first unless ``install`` is set."""
    if install is None:
        install = click.confirm("Would you like to run 'npm install'?", default=True)
    if not install:
        return False

    console.print("\nRunning 'npm install'...")
    try:
        run(["npm", "install"], cwd=ctx.project_path)
    except (subprocess.CalledProcessError, OSError) as e:
        raise MintError(f"'npm install' failed in {ctx.project_path}: {e}") from e
    return True


def report(meta: TemplateMeta, data: Mapping[str, Any]) -> str:
    """Print the template's completion message, or a generic one."""
    if not meta.complete_message:
        console.print("\nDone!", style="bold green")
        return "Done!"

    try:
        message = render_string(meta.complete_message, data)
    except Exception as e:
        raise RenderFailure("completeMessage", str(e)) from e
    indented = "\n".join("   " + line for line in message.splitlines())
    console.print("\n" + indented, style="bold green", markup=False, highlight=False)
    return message


def run_init(
    template_name: str,
    project_name: Optional[str] = None,
    *,
    answers: Optional[Mapping[str, Any]] = None,
    install: Optional[bool] = None,
    cwd: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> BuildContext:
    """Run every init stage and return the final context.

    Raises :class:`UserDeclined` when the user refuses to reuse an existing
    directory; nothing is written in that case.
    """
    cwd = (cwd or Path.cwd()).resolve()
    settings = settings or get_settings()
    ctx = BuildContext.create(
        {"template_name": template_name, "project_name": project_name}
    )

    resolve_project(ctx, cwd)
    locate_template(ctx, settings, cwd)
    meta = load_template_meta(ctx, answers)
    check_destination(ctx)
    pipeline = build_project(ctx, meta)
    install_dependencies(ctx, install)
    report(meta, pipeline.metadata())
    return ctx
