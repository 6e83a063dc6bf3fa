from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional, Union

import pytest

from mint.build import FileRecord, FileSet

TemplateFactory = Callable[..., Path]


def file_set(files: Dict[str, Union[str, bytes]]) -> FileSet:
    return {
        name: FileRecord(contents=c.encode("utf-8") if isinstance(c, str) else c)
        for name, c in files.items()
    }


@pytest.fixture
def make_template(tmp_path: Path) -> TemplateFactory:
    """Create a template directory with a ``template/`` tree and optional descriptor."""

    def _make(
        files: Dict[str, Union[str, bytes]],
        meta_py: Optional[str] = None,
        meta_yml: Optional[str] = None,
        name: str = "tpl",
    ) -> Path:
        root = tmp_path / name
        source = root / "template"
        source.mkdir(parents=True)
        for rel, content in files.items():
            path = source / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        if meta_py is not None:
            (root / "meta.py").write_text(meta_py, encoding="utf-8")
        if meta_yml is not None:
            (root / "meta.yml").write_text(meta_yml, encoding="utf-8")
        return root

    return _make
