import json
from pathlib import Path

from busroute.persistence.filesystem import FileStorage


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path.resolve() / "outputs"
    assert run_dir.name.startswith("route_test_")


def test_run_directories_do_not_collide(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    first = storage.make_run_directory(prefix="route_test")
    second = storage.make_run_directory(prefix="route_test")

    assert first != second


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="route_test")

    summary_path = run_dir / "summary.json"
    assignments_path = run_dir / "assignments.csv"

    storage.write_json(summary_path, {"hello": "world"})
    storage.write_csv(assignments_path, "a,b\n1,2\n")

    assert summary_path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert assignments_path.read_text(encoding="utf-8") == "a,b\n1,2\n"


def test_save_run_writes_both_files(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.save_run("route_K5", {"K": 5, "label": "תחנה"}, "sequence,label\n1,Stop 1\n")

    assert json.loads((run_dir / "summary.json").read_text(encoding="utf-8")) == {"K": 5, "label": "תחנה"}
    assert (run_dir / "assignments.csv").read_text(encoding="utf-8").startswith("sequence,label")
    assert run_dir.name.startswith("route_K5_")
