"""Tests for the batch coordinator."""
import errno

import pytest

from myfilemanager.core.batch import BatchCoordinator
from myfilemanager.core.errors import EngineContractError, ErrorKind
from myfilemanager.core.models import CancelToken, ItemStatus, OperationKind
from myfilemanager.core.transfer import TransferExecutor


class TestExecute:
    def test_missing_middle_path(self, temp_tree):
        src = temp_tree["src"]
        paths = [str(src / "file1.txt"), str(src / "missing.txt"), str(src / "file2.py")]
        report = BatchCoordinator().execute(paths, OperationKind.COPY, str(temp_tree["dest"]))

        assert [item.source for item in report.items] == paths
        assert [item.status for item in report.items] == [
            ItemStatus.SUCCEEDED, ItemStatus.FAILED, ItemStatus.SUCCEEDED]
        assert report.items[1].error_kind is ErrorKind.NOT_FOUND
        assert (temp_tree["dest"] / "file2.py").exists()

    def test_failures_carry_their_destination(self, temp_tree):
        (temp_tree["dest"] / "file1.txt").write_text("old", encoding="utf-8")
        report = BatchCoordinator().execute([str(temp_tree["src"] / "file1.txt")], OperationKind.COPY,
                                            str(temp_tree["dest"]))
        item = report.items[0]
        assert item.error_kind is ErrorKind.ALREADY_EXISTS
        assert item.destination == str(temp_tree["dest"] / "file1.txt")
        assert (temp_tree["dest"] / "file1.txt").read_text(encoding="utf-8") == "old"

    def test_move_batch(self, temp_tree):
        src = temp_tree["src"]
        report = BatchCoordinator().execute([str(src / "file1.txt"), str(src / "subdir")],
                                            OperationKind.MOVE, str(temp_tree["dest"]))
        assert report.ok
        assert (temp_tree["dest"] / "subdir" / "nested.md").exists()
        assert not (src / "subdir").exists()

    def test_delete_batch(self, temp_tree):
        src = temp_tree["src"]
        report = BatchCoordinator().execute([str(src / "file1.txt"), str(src / "subdir")], OperationKind.DELETE)
        assert report.ok
        assert report.target_dir is None
        assert report.items[0].destination is None
        assert sorted(p.name for p in src.iterdir()) == ["file2.py"]

    def test_duplicate_paths_are_collapsed(self, temp_tree):
        path = str(temp_tree["src"] / "file1.txt")
        report = BatchCoordinator().execute([path, path], OperationKind.COPY, str(temp_tree["dest"]))
        assert len(report.items) == 1
        assert report.ok

    def test_same_name_from_two_folders(self, temp_tree):
        other = temp_tree["root"] / "other"
        other.mkdir()
        (other / "file1.txt").write_text("second", encoding="utf-8")
        paths = [str(temp_tree["src"] / "file1.txt"), str(other / "file1.txt")]
        report = BatchCoordinator().execute(paths, OperationKind.COPY, str(temp_tree["dest"]))

        assert report.items[0].succeeded
        assert report.items[1].error_kind is ErrorKind.ALREADY_EXISTS
        assert (temp_tree["dest"] / "file1.txt").read_text(encoding="utf-8") == "hello"

    def test_cancel_marks_remaining_items(self, temp_tree):
        cancel = CancelToken()
        cancel.cancel()
        src = temp_tree["src"]
        report = BatchCoordinator().execute([str(src / "file1.txt"), str(src / "file2.py")],
                                            OperationKind.COPY, str(temp_tree["dest"]), cancel)
        assert [item.error_kind for item in report.items] == [ErrorKind.CANCELLED, ErrorKind.CANCELLED]
        assert list(temp_tree["dest"].iterdir()) == []

    def test_summary(self, temp_tree):
        src = temp_tree["src"]
        report = BatchCoordinator().execute([str(src / "file1.txt"), str(src / "nope")],
                                            OperationKind.COPY, str(temp_tree["dest"]))
        assert report.summary() == "Copied 1 items, 1 failed"


class TestContract:
    def test_empty_target(self, temp_tree):
        with pytest.raises(EngineContractError):
            BatchCoordinator().execute([str(temp_tree["src"] / "file1.txt")], OperationKind.COPY, "")

    def test_empty_selection(self, temp_tree):
        with pytest.raises(EngineContractError):
            BatchCoordinator().execute([], OperationKind.DELETE)

    def test_empty_path_string(self, temp_tree):
        with pytest.raises(EngineContractError):
            BatchCoordinator().execute([""], OperationKind.DELETE)

    def test_single_string_instead_of_list(self, temp_tree):
        with pytest.raises(EngineContractError):
            BatchCoordinator().execute(str(temp_tree["src"]), OperationKind.DELETE)

    def test_rename_is_not_a_batch_operation(self, temp_tree):
        with pytest.raises(EngineContractError):
            BatchCoordinator().execute([str(temp_tree["src"])], OperationKind.RENAME, str(temp_tree["dest"]))


class TestParallel:
    def test_parallel_batch_keeps_selection_order(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        dest = tmp_path / "dest"
        dest.mkdir()
        paths = []
        for i in range(20):
            p = src / f"f{i:02d}.txt"
            p.write_text(str(i), encoding="utf-8")
            paths.append(str(p))

        report = BatchCoordinator(max_workers=4).execute(paths, OperationKind.COPY, str(dest))

        assert [item.source for item in report.items] == paths
        assert report.ok
        assert len(list(dest.iterdir())) == 20

    def test_lanes_group_colliding_names(self, tmp_path):
        coordinator = BatchCoordinator(max_workers=4)
        lanes = coordinator._lanes([str(tmp_path / "a" / "x"), str(tmp_path / "b" / "y"),
                                    str(tmp_path / "c" / "x")])
        assert sorted(lanes) == [[0, 2], [1]]

    def test_nested_selection_runs_in_one_lane(self, tmp_path):
        coordinator = BatchCoordinator(max_workers=4)
        lanes = coordinator._lanes([str(tmp_path / "a"), str(tmp_path / "a" / "b"), str(tmp_path / "c")])
        assert lanes == [[0, 1, 2]]

    def test_parallel_failure_is_isolated(self, temp_tree, monkeypatch):
        real_copy = TransferExecutor._copy_file

        def flaky(self, src, dst):
            if src.endswith("file2.py"):
                raise OSError(errno.EIO, "Input/output error", src)
            real_copy(self, src, dst)

        monkeypatch.setattr(TransferExecutor, "_copy_file", flaky)
        src = temp_tree["src"]
        paths = [str(src / "file1.txt"), str(src / "file2.py"), str(src / "subdir")]
        report = BatchCoordinator(max_workers=3).execute(paths, OperationKind.COPY, str(temp_tree["dest"]))

        assert [item.error_kind for item in report.items] == [None, ErrorKind.COPY_FAILED, None]
