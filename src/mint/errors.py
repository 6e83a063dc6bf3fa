"""Errors raised while scaffolding a project."""

from __future__ import annotations

from typing import Optional


class MintError(Exception):
    """Base class for every error the init pipeline reports"""


class DownloadFailure(MintError):
    """Raise when a remote template repository could not be fetched"""

    def __init__(self, repo: str, reason: Optional[str] = None) -> None:
        self.repo = repo
        message = f"Failed to download repo from '{repo}'!"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class InvalidExpression(MintError):
    """Raise when a filter or render condition cannot be parsed or evaluated"""

    def __init__(self, expression: object, reason: str) -> None:
        self.expression = expression
        super().__init__(f"Invalid expression {expression!r}: {reason}")


class RenderFailure(MintError):
    """Raise when a template file contains malformed template syntax"""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to render '{path}': {reason}")


class FilesystemFailure(MintError):
    """Raise when a directory cannot be created or a file cannot be read/written"""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Filesystem error at '{path}': {reason}")


class TemplateNotFound(MintError):
    """Raise when a local template path does not exist"""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Template not found: {path}")


class InvalidDescriptor(MintError):
    """Raise when a template's meta file does not produce a descriptor mapping"""


class UserDeclined(MintError):
    """Raise when the user chooses not to continue. Not a failure."""
