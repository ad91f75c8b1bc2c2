"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repoast import cli
from repoast.cli import _build_parser
from repoast.errors import PublishError
from repoast.models import Aggregate
from repoast.remote.sandbox import SandboxPreview


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("REPOAST_LLM_API_KEY", "OPENAI_API_KEY", "REPOAST_GITHUB_TOKEN", "GITHUB_TOKEN"):
        monkeypatch.delenv(key, raising=False)


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["analyze", "--verbose"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_analyze_defaults() -> None:
    args = _build_parser().parse_args(["analyze"])
    assert args.path == "."
    assert args.ignore == []
    assert args.workers is None
    assert args.no_summary is False


def test_remote_requires_owner_and_repo() -> None:
    args = _build_parser().parse_args(["remote", "acme", "site", "-o", "out.json"])
    assert (args.owner, args.repo, args.output) == ("acme", "site", "out.json")

    with pytest.raises(SystemExit):
        _build_parser().parse_args(["remote", "acme"])


def test_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "0.0.0.0"
    assert args.port == 5000


def test_analyze_writes_artifact(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = tmp_path / "site"
    (root / "src").mkdir(parents=True)
    (root / "src" / "index.js").write_text("console.log('hi');\n", encoding="utf-8")
    (root / "build").mkdir()
    (root / "build" / "bundle.js").write_text("var x;\n", encoding="utf-8")
    output = tmp_path / "asts.json"

    cli.main(["analyze", str(root), "-o", str(output), "--no-summary", "--ignore", "build"])

    document = json.loads(output.read_text(encoding="utf-8"))
    assert [entry["file"] for entry in document["files"]] == ["src/index.js"]
    assert document["files"][0]["ast"]["type"] == "program"
    assert "Wrote 1 file records" in capsys.readouterr().out


def test_analyze_missing_root_exits_without_artifact(tmp_path: Path) -> None:
    output = tmp_path / "asts.json"

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(tmp_path / "missing"), "-o", str(output), "--no-summary"])

    assert excinfo.value.code == 1
    assert not output.exists()


def test_analyze_rejects_non_positive_workers(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(tmp_path), "--workers", "0"])

    assert excinfo.value.code == 1


def test_publish_prints_preview_url(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    app_file = tmp_path / "App.js"
    app_file.write_text("export default () => null;\n", encoding="utf-8")
    published: list[str] = []

    class _FakePublisher:
        def __init__(self, **kwargs: object) -> None:
            pass

        def publish(self, code: str) -> SandboxPreview:
            published.append(code)
            return SandboxPreview("xyz", "https://xyz.csb.app/", "https://codesandbox.io/s/xyz")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "SandboxPublisher", _FakePublisher)

    cli.main(["publish", str(app_file)])

    assert published == ["export default () => null;\n"]
    assert "Preview available at https://xyz.csb.app/" in capsys.readouterr().out


def test_publish_failure_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    app_file = tmp_path / "App.js"
    app_file.write_text("export default () => null;\n", encoding="utf-8")

    class _FailingPublisher:
        def __init__(self, **kwargs: object) -> None:
            pass

        def publish(self, code: str) -> SandboxPreview:
            raise PublishError("Sandbox creation failed")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "SandboxPublisher", _FailingPublisher)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["publish", str(app_file)])

    assert excinfo.value.code == 1


def test_log_file_accepted_after_command(tmp_path: Path) -> None:
    args = _build_parser().parse_args(["analyze", "--log-file", str(tmp_path / "run.log")])
    assert args.log_file == str(tmp_path / "run.log")
    assert _build_parser().parse_args(["analyze"]).log_file is None


def test_analyze_writes_debug_log(tmp_path: Path) -> None:
    root = tmp_path / "site"
    root.mkdir()
    (root / "README.md").write_text("# Site\n", encoding="utf-8")
    log_file = tmp_path / "logs" / "run.log"

    cli.main(
        [
            "analyze",
            str(root),
            "-o",
            str(tmp_path / "asts.json"),
            "--no-summary",
            "--log-file",
            str(log_file),
        ]
    )

    text = log_file.read_text(encoding="utf-8")
    assert "repoast.pipeline" in text
    assert "Processed 1 files" in text


def test_analyze_unwritable_output_exits(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    root = tmp_path / "site"
    root.mkdir()
    (root / "README.md").write_text("# Site\n", encoding="utf-8")
    blocker = tmp_path / "file.txt"
    blocker.write_text("not a directory\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", str(root), "-o", str(blocker / "out.json"), "--no-summary"])

    assert excinfo.value.code == 1
    assert "unable to write" in capsys.readouterr().err
    assert blocker.read_text(encoding="utf-8") == "not a directory\n"


def test_remote_unwritable_output_exits(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        cli.Pipeline,
        "run_remote",
        lambda self, owner, repo: Aggregate(metadata=None, files=()),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["remote", "acme", "site", "-o", str(blocker / "site.json"), "--no-summary"])

    assert excinfo.value.code == 1
    assert "repoast remote failed: unable to write" in capsys.readouterr().err
