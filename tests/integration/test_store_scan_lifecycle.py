from pathlib import Path

from docstore.adapters.fs.local_fs import LocalFS
from docstore.services import DocumentStore, ScanService


def write_file(p: Path, data: bytes) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)


def test_documents_saved_through_store_show_up_in_scan(tmp_path: Path):
    # Arrange: a store with a few documents of different formats
    store = DocumentStore("db", cwd=tmp_path)
    store.save_document("users/alice.json", {"name": "Alice"})
    store.save_document("users/bob.json", {"name": "Bob"})
    store.write_document("logs/app.log", "started\n")
    store.write_document("logs/app.log", "stopped\n")
    store.save_document("README.txt", "hello")

    # Act
    results = list(store.find(".", sort="size", order="desc"))

    # Assert: every node once, parents first, totals match the disk
    paths = [r.file.path for r in results]
    assert sorted(paths) == sorted(
        ["users", "logs", "users/alice.json", "users/bob.json", "logs/app.log", "README.txt"]
    )
    for r in results:
        if r.file.depth > 0:
            assert paths.index(r.file.parent_path) < paths.index(r.file.path)

    on_disk = sum(p.stat().st_size for p in (tmp_path / "db").rglob("*") if p.is_file())
    last = results[-1]
    assert last.total_size.files == on_disk
    assert last.dirs["users"] == store.stat("users/alice.json").size + store.stat("users/bob.json").size
    assert last.top["logs"] == len("started\nstopped\n")


def test_scan_with_real_tree_and_limit(tmp_path: Path):
    root = tmp_path / "data"
    write_file(root / "a.txt", b"x" * 10)
    write_file(root / "nested" / "b.txt", b"x" * 20)
    write_file(root / "nested" / "deeper" / "c.txt", b"x" * 30)

    full = list(ScanService(LocalFS()).scan(root))
    limited = list(ScanService(LocalFS()).scan(root, limit=3))

    assert len(full) == 5
    assert [r.file.path for r in limited] == [r.file.path for r in full[:3]]
    assert full[-1].total_size.files == 60
    assert dict(full[-1].dirs) == {"nested": 50, "nested/deeper": 30}
