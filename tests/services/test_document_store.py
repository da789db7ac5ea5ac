# tests/services/test_document_store.py
import json
from pathlib import Path

import pytest

from docstore.adapters.formats import JsonFormat
from docstore.domain.errors import AccessDenied, DirectoryNotEmpty, NotFound
from docstore.services.document_store import DocumentStore


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    return DocumentStore("__test_fs__", cwd=tmp_path)


def test_json_save_then_load_roundtrip(store: DocumentStore, tmp_path: Path):
    data = {"name": "Alice", "age": 30, "tags": ["a", "b"], "nested": {"ok": True}}
    assert store.save_document("users/user1.json", data) is True

    assert store.load_document("users/user1.json") == data
    on_disk = (tmp_path / "__test_fs__" / "users" / "user1.json").read_text(encoding="utf-8")
    assert on_disk == json.dumps(data, indent=2)


def test_text_save_is_written_verbatim(store: DocumentStore):
    assert store.save_document("notes/test.txt", "raw content") is True
    assert store.load_document("notes/test.txt") == "raw content"


def test_ndjson_and_csv_roundtrip(store: DocumentStore):
    records = [{"id": 1}, {"id": 2}]
    rows = [{"path": "a", "size": "1"}, {"path": "b", "size": "2"}]
    assert store.save_document("log.jsonl", records)
    assert store.save_document("table.csv", rows)
    assert store.load_document("log.jsonl") == records
    assert store.load_document("table.csv") == rows


def test_write_document_appends_chunks(store: DocumentStore):
    assert store.write_document("logs/greet.txt", "Hello World\n") is True
    assert store.write_document("logs/greet.txt", "Goodbye") is True
    assert store.load_document("logs/greet.txt") == "Hello World\nGoodbye"


def test_load_missing_returns_default(store: DocumentStore):
    assert store.load_document("nonexistent.txt", "default") == "default"
    assert store.load_document("nonexistent.json", None) is None


def test_save_builds_directories_and_tracks_stat(store: DocumentStore, tmp_path: Path):
    store.save_document("modules/utils/handlers/validator.js", "const a = 'dummy content'")
    assert (tmp_path / "__test_fs__" / "modules" / "utils" / "handlers" / "validator.js").is_file()
    assert sorted(store.meta) == ["modules/utils/handlers/validator.js"]
    assert store.meta["modules/utils/handlers/validator.js"].size == len("const a = 'dummy content'")


def test_save_returns_false_when_no_handler_accepts(tmp_path: Path):
    store = DocumentStore("db", cwd=tmp_path, savers=[JsonFormat()])
    assert store.save_document("a.txt", "text") is False
    assert not (tmp_path / "db" / "a.txt").exists()


def test_save_invalidates_cached_document(store: DocumentStore):
    store.save_document("conf.json", {"v": 1})
    assert store.get("conf.json") == {"v": 1}
    assert store.data["conf.json"] == {"v": 1}

    store.save_document("conf.json", {"v": 2})
    assert "conf.json" not in store.data
    assert store.get("conf.json") == {"v": 2}


def test_drop_missing_returns_false(store: DocumentStore):
    assert store.drop_document("file1.txt") is False


def test_drop_directory_with_tracked_children_refused(store: DocumentStore, tmp_path: Path):
    store.save_document("d/a.json", {"x": 1})

    with pytest.raises(DirectoryNotEmpty):
        store.drop_document("d")

    assert store.drop_document("d/a.json") is True
    assert "d/a.json" not in store.meta
    assert store.drop_document("d") is True
    assert not (tmp_path / "__test_fs__" / "d").exists()


def test_drop_untracked_non_empty_directory_refused(store: DocumentStore, tmp_path: Path):
    target = tmp_path / "__test_fs__" / "raw"
    target.mkdir(parents=True)
    (target / "f.txt").write_text("x")
    with pytest.raises(DirectoryNotEmpty):
        store.drop_document("raw")


def test_crud_outside_root_is_denied(store: DocumentStore):
    with pytest.raises(AccessDenied):
        store.load_document("../outside.txt")
    with pytest.raises(AccessDenied):
        store.save_document("../outside.json", {})
    with pytest.raises(AccessDenied):
        store.drop_document("../outside.txt")


def test_stat_document_and_cached_stat(store: DocumentStore):
    missing = store.stat_document("nonexistent.txt")
    assert missing.error is not None and not missing.exists

    store.save_document("file1.txt", "content")
    stat = store.stat("file1.txt")
    assert stat.exists and stat.size == 7 and stat.mtime_ms > 0
    assert store.stat("file1.txt") is stat


def test_list_dir_directories_first(store: DocumentStore):
    store.save_document("b.txt", "b")
    store.save_document("sub/c.txt", "c")
    entries = store.list_dir(".")
    assert [(e.name, e.is_directory) for e in entries] == [("sub", True), ("b.txt", False)]
    with pytest.raises(NotFound):
        store.list_dir("b.txt")


def test_find_streams_store_tree(store: DocumentStore):
    store.save_document("a.txt", "x" * 10)
    store.save_document("b.txt", "x" * 20)
    store.save_document("dir/c.txt", "x" * 30)

    results = list(store.find(".", sort="name", order="asc"))

    assert [r.file.path for r in results] == ["dir", "a.txt", "b.txt", "dir/c.txt"]
    assert results[-1].total_size.files == 60


def test_extract_reroots_store_and_cache(store: DocumentStore):
    store.save_document("users/u1.json", {"id": 1})
    store.save_document("other.txt", "o")
    store.load_document("users/u1.json")

    users = store.extract("users")

    assert sorted(users.meta) == ["u1.json"]
    assert users.data == {"u1.json": {"id": 1}}
    assert users.load_document("u1.json") == {"id": 1}
    with pytest.raises(AccessDenied):
        users.load_document("../other.txt")
