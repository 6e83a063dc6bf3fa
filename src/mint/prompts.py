"""Ask template questions on the terminal.

Questions use the same shape as Inquirer prompts::

    {"type": "list", "name": "transporter", "message": "Select a transporter",
     "choices": [{"name": "NATS (recommended)", "value": "NATS"}, "Redis"],
     "default": "NATS", "when": "needTransporter"}

Supported types are ``input`` (default), ``password``, ``number``,
``confirm`` and ``list``. ``when`` may be a bool, a condition expression or a
callable; ``default`` may be a callable. Callables receive the context merged
with the answers collected so far.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

import click

from .conditions import evaluate
from .errors import InvalidDescriptor
from .utils.logging import get_logger

logger = get_logger(__name__)


def _choices(question: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    out: List[Tuple[str, Any]] = []
    for choice in question.get("choices") or []:
        if isinstance(choice, Mapping):
            name = str(choice.get("name", choice.get("value")))
            out.append((name, choice.get("value", name)))
        else:
            out.append((str(choice), choice))
    if not out:
        raise InvalidDescriptor(f"Question '{question.get('name')}' has no choices")
    return out


def _ask_list(message: str, question: Mapping[str, Any], default: Any) -> Any:
    choices = _choices(question)
    for i, (name, _) in enumerate(choices, start=1):
        click.echo(f"  {i}) {name}")

    names = [name for name, _ in choices]
    default_index = 1
    for i, (name, value) in enumerate(choices, start=1):
        if default in (name, value):
            default_index = i
    if isinstance(default, int) and not isinstance(default, bool):
        if 0 <= default < len(choices):
            default_index = default + 1

    picked = click.prompt(
        message,
        type=click.IntRange(1, len(names)),
        default=default_index,
    )
    return choices[picked - 1][1]


def ask_question(question: Mapping[str, Any], default: Any) -> Any:
    """Prompt for a single question and return the answer."""
    kind = question.get("type", "input")
    message = str(question.get("message") or question["name"])

    if kind == "confirm":
        return click.confirm(message, default=True if default is None else bool(default))
    if kind in ("list", "rawlist"):
        return _ask_list(message, question, default)
    if kind == "number":
        number_type = int if isinstance(default, int) and not isinstance(default, bool) else float
        return click.prompt(message, type=number_type, default=default)
    if kind == "password":
        return click.prompt(message, default=default, hide_input=True)
    return click.prompt(message, default=default)


def ask_questions(
    questions: List[Dict[str, Any]],
    context: Mapping[str, Any],
    preset: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Ask every question whose ``when`` holds; preset answers are not asked."""
    preset = preset or {}
    answers: Dict[str, Any] = {}
    for question in questions:
        name = question.get("name")
        if not name:
            raise InvalidDescriptor("Every question needs a 'name'")

        if name in preset:
            answers[name] = preset[name]
            continue

        scope = {**context, **answers}
        when = question.get("when", True)
        if not evaluate(when, scope):
            logger.debug("Skipping question %s", name)
            continue

        default = question.get("default")
        if callable(default):
            default = default(scope)
        answers[name] = ask_question(question, default)
    return answers
