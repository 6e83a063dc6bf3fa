from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest

import mint.init as init_mod
from mint.config import Settings
from mint.context import BuildContext
from mint.errors import UserDeclined
from mint.init import check_destination, report, resolve_project, run_init
from mint.templates import TemplateMeta

META_PY = '''
def meta(values):
    def after(pipeline):
        pipeline.metadata()["after_ran"] = True

    def complete(pipeline):
        dest = pipeline.destination_path
        (dest / "COMPLETE").write_text(pipeline.metadata()["project_name"])

    return {
        "questions": [
            {"type": "confirm", "name": "needTests", "default": True},
            {"type": "list", "name": "transporter", "choices": ["NATS", "Redis"]},
        ],
        "filters": {"test/**": "needTests"},
        "metalsmith": {"after": after, "complete": complete},
        "completeMessage": "cd {{ project_name }}\\nnpm run dev",
    }
'''


def settings_for(tmp_path: Path) -> Settings:
    return Settings(
        template_org="ice-services",
        template_prefix="moleculer-template-",
        git_host="https://github.com",
        cache_dir=tmp_path / "cache",
    )


@pytest.mark.parametrize("name", [None, "", "."])
def test_missing_project_name_builds_in_place(tmp_path: Path, name: Any) -> None:
    cwd = tmp_path / "my-service"
    cwd.mkdir()
    ctx = BuildContext.create({"project_name": name})
    resolve_project(ctx, cwd)
    assert ctx.project_name == "my-service"
    assert ctx.in_place is True
    assert ctx.project_path == cwd


def test_explicit_project_name(tmp_path: Path) -> None:
    ctx = BuildContext.create({"project_name": "api"})
    resolve_project(ctx, tmp_path)
    assert ctx.in_place is False
    assert ctx.project_path == (tmp_path / "api").resolve()


def test_context_defaults_to_current_year() -> None:
    assert BuildContext.create(year=2024)["year"] == 2024
    assert isinstance(BuildContext.create()["year"], int)


def test_existing_destination_declined(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / "api").mkdir()
    monkeypatch.setattr(init_mod.click, "confirm", lambda *a, **k: False)
    ctx = BuildContext.create({"project_name": "api", "project_path": str(tmp_path / "api")})
    with pytest.raises(UserDeclined):
        check_destination(ctx)


def test_missing_destination_is_created(tmp_path: Path) -> None:
    dest = tmp_path / "a" / "b"
    ctx = BuildContext.create({"project_name": "b", "project_path": str(dest)})
    check_destination(ctx)
    assert dest.is_dir()


def test_empty_cwd_in_place_does_not_prompt(monkeypatch, tmp_path: Path) -> None:
    def boom(*args: Any, **kwargs: Any) -> bool:
        raise AssertionError("should not prompt")

    monkeypatch.setattr(init_mod.click, "confirm", boom)
    ctx = BuildContext.create(
        {"project_name": tmp_path.name, "project_path": str(tmp_path), "in_place": True}
    )
    check_destination(ctx)


def test_run_init_end_to_end(make_template, tmp_path: Path) -> None:
    template = make_template(
        {
            "package.json": '{"name": "{{ project_name }}", "year": {{ year }}}\n',
            "test/unit/api.spec.js": "// tests for {{ project_name }}\n",
            "moleculer.config.js": (
                "module.exports = {\n"
                '{% if_eq transporter, "NATS" %}  transporter: "NATS",\n{% endif_eq %}'
                '  namespace: "{{ project_name }}"\n'
                "};\n"
            ),
            "public/logo.png": b"\x89PNG\r\n\x1a\n",
            ".gitignore": "node_modules\n",
        },
        meta_py=META_PY,
    )
    work = tmp_path / "work"
    work.mkdir()

    ctx = run_init(
        str(template),
        "api",
        answers={"needTests": False, "transporter": "NATS"},
        install=False,
        cwd=work,
        settings=settings_for(tmp_path),
    )

    dest = work / "api"
    assert ctx.project_path == dest
    assert ctx["after_ran"] is True
    assert ctx["tmp"] == str(template.resolve())
    assert "template_repo" not in ctx

    year = ctx["year"]
    assert (dest / "package.json").read_text() == f'{{"name": "api", "year": {year}}}\n'
    assert (dest / "moleculer.config.js").read_text() == (
        'module.exports = {\n  transporter: "NATS",\n  namespace: "api"\n};\n'
    )
    assert (dest / "public" / "logo.png").read_bytes() == b"\x89PNG\r\n\x1a\n"
    assert (dest / ".gitignore").read_text() == "node_modules\n"
    assert not (dest / "test").exists()
    assert (dest / "COMPLETE").read_text() == "api"


def test_run_init_installs_when_requested(monkeypatch, make_template, tmp_path: Path) -> None:
    template = make_template({"index.js": "x"})
    calls: List[Any] = []
    monkeypatch.setattr(init_mod, "run", lambda cmd, cwd=None: calls.append((cmd, cwd)))

    run_init(str(template), "svc", install=True, cwd=tmp_path, settings=settings_for(tmp_path))
    assert calls == [(["npm", "install"], (tmp_path / "svc").resolve())]


def test_declined_destination_writes_nothing(monkeypatch, make_template, tmp_path: Path) -> None:
    template = make_template({"index.js": "{{ project_name }}"})
    existing = tmp_path / "svc"
    existing.mkdir()
    (existing / "keep.txt").write_text("keep")
    monkeypatch.setattr(init_mod.click, "confirm", lambda *a, **k: False)

    with pytest.raises(UserDeclined):
        run_init(str(template), "svc", install=False, cwd=tmp_path, settings=settings_for(tmp_path))
    assert [p.name for p in existing.iterdir()] == ["keep.txt"]


def test_remote_template_is_downloaded(monkeypatch, make_template, tmp_path: Path) -> None:
    template = make_template({"index.js": "{{ template_repo }}"})
    seen: List[str] = []

    def fake_download(remote, dest, settings) -> Path:
        seen.append(str(remote))
        return template

    monkeypatch.setattr(init_mod, "download_template", fake_download)
    ctx = run_init("foo", "svc", install=False, cwd=tmp_path, settings=settings_for(tmp_path))

    assert seen == ["ice-services/moleculer-template-foo"]
    assert ctx["template_repo"] == "ice-services/moleculer-template-foo"
    assert (tmp_path / "svc" / "index.js").read_text() == "ice-services/moleculer-template-foo"


def test_report_renders_complete_message(capsys) -> None:
    meta = TemplateMeta(complete_message="cd {{ project_name }}\nnpm run dev")
    assert report(meta, {"project_name": "svc"}) == "cd svc\nnpm run dev"
    out = capsys.readouterr().out
    assert "   cd svc" in out
    assert "   npm run dev" in out


def test_report_without_message(capsys) -> None:
    assert report(TemplateMeta(), {}) == "Done!"
    assert "Done!" in capsys.readouterr().out


def test_report_wraps_runtime_errors() -> None:
    from mint.errors import RenderFailure

    meta = TemplateMeta(complete_message="{{ name + 1 }}")
    with pytest.raises(RenderFailure) as exc:
        report(meta, {"name": "svc"})
    assert exc.value.path == "completeMessage"


def test_answers_cannot_override_resolved_keys(make_template, tmp_path: Path) -> None:
    template = make_template({"index.js": "{{ project_name }} {{ description }}"})
    ctx = run_init(
        str(template),
        "svc",
        answers={"project_name": "other", "tmp": "/nowhere", "description": "api"},
        install=False,
        cwd=tmp_path,
        settings=settings_for(tmp_path),
    )
    assert ctx.project_name == "svc"
    assert ctx["tmp"] == str(template.resolve())
    assert (tmp_path / "svc" / "index.js").read_text() == "svc api"
