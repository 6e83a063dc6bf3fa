"""CLI interface for mint - Moleculer project scaffolding."""

from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import NoReturn, Optional

import click

from .config import load_answers
from .errors import UserDeclined
from .init import run_init
from .utils import configure_logging, console


def fail(err: BaseException, verbose: bool = False) -> NoReturn:
    """Report an unrecovered error and exit with a failure status."""
    console.print(f"ERROR! {err}", style="bold red", markup=False, highlight=False)
    if verbose:
        console.print(
            "".join(traceback.format_exception(type(err), err, err.__traceback__)),
            markup=False,
        )
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Create Moleculer projects from templates."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(verbose=verbose)


@cli.command("init")
@click.argument("template_name")
@click.argument("project_name", required=False)
@click.option(
    "--answers",
    "answers_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML or JSON file with answers to the template questions",
)
@click.option(
    "--install/--no-install",
    default=None,
    help="Run 'npm install' without asking (default: ask)",
)
@click.pass_context
def init_cmd(
    ctx: click.Context,
    template_name: str,
    project_name: Optional[str],
    answers_file: Optional[Path],
    install: Optional[bool],
) -> None:
    """
    Create a Moleculer project from template.

    TEMPLATE_NAME is a local path (starting with '.', '/' or '~') or a remote
    template: a bare name like 'project' resolves to
    ice-services/moleculer-template-project, while 'org/repo' is used as-is.
    Append '#branch' to pick a branch or tag.

    PROJECT_NAME defaults to the current directory, building in place.
    """
    verbose = bool((ctx.obj or {}).get("verbose"))
    try:
        answers = load_answers(answers_file) if answers_file else None
        run_init(template_name, project_name, answers=answers, install=install)
    except UserDeclined:
        sys.exit(0)
    except (KeyboardInterrupt, click.Abort):
        console.print("\nInterrupted", style="yellow")
        sys.exit(130)
    except Exception as err:
        fail(err, verbose)


def main() -> None:
    cli(obj={})
