"""The data shared by every init stage."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class BuildContext(Dict[str, Any]):
    """Metadata handed to filters, templates and hooks.

    A plain dict so that templates, conditions and ``meta.py`` hooks can read
    and update it like any other mapping. The well-known keys are exposed as
    properties for the init stages.
    """

    @classmethod
    def create(
        cls, values: Optional[Mapping[str, Any]] = None, *, year: Optional[int] = None
    ) -> "BuildContext":
        ctx = cls(year=year if year is not None else date.today().year)
        if values:
            ctx.update(values)
        return ctx

    @property
    def template_name(self) -> str:
        return str(self["template_name"])

    @property
    def project_name(self) -> str:
        return str(self["project_name"])

    @property
    def project_path(self) -> Path:
        return Path(self["project_path"])

    @property
    def template_path(self) -> Path:
        return Path(self["tmp"])

    @property
    def in_place(self) -> bool:
        return bool(self.get("in_place", False))
