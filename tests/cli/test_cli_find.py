# tests/cli/test_cli_find.py
from pathlib import Path

from typer.testing import CliRunner

from docstore.cli.app import app
from docstore.domain.errors import FilesystemError
from docstore.services.document_store import DocumentStore

runner = CliRunner()


def make_tree(root: Path) -> None:
    (root / "dir").mkdir(parents=True)
    (root / "a.txt").write_text("x" * 10)
    (root / "b.txt").write_text("x" * 20)
    (root / "dir" / "c.txt").write_text("x" * 30)


def test_find_quiet_prints_summary(tmp_path: Path):
    make_tree(tmp_path)
    r = runner.invoke(app, ["find", str(tmp_path), "--quiet"])
    assert r.exit_code == 0, r.output
    assert "Scanned 4 entries" in r.output
    assert "errors 0" in r.output
    assert r.output.rstrip().endswith("Done.")


def test_find_with_live_panel_and_options(tmp_path: Path):
    make_tree(tmp_path)
    r = runner.invoke(
        app,
        ["find", str(tmp_path), "--sort", "size", "--order", "asc", "--limit", "2", "--verbose"],
    )
    assert r.exit_code == 0, r.output
    assert "Scanned 2 entries" in r.output


def test_find_rejects_unknown_sort(tmp_path: Path):
    r = runner.invoke(app, ["find", str(tmp_path), "--sort", "colour"])
    assert r.exit_code != 0


def test_find_rejects_bad_limit(tmp_path: Path):
    r = runner.invoke(app, ["find", str(tmp_path), "--limit", "-5"])
    assert r.exit_code != 0


def test_find_missing_root_fails(tmp_path: Path):
    r = runner.invoke(app, ["find", str(tmp_path / "missing")])
    assert r.exit_code != 0


def test_find_scan_failure_exits_non_zero(tmp_path: Path, monkeypatch):
    def broken_find(self, uri=".", **options):
        raise FilesystemError("Cannot list root: permission denied")

    monkeypatch.setattr(DocumentStore, "find", broken_find, raising=True)
    r = runner.invoke(app, ["find", str(tmp_path), "--quiet"])
    assert r.exit_code == 1
