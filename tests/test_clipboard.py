"""Tests for the clipboard stager."""
import threading

import pytest

from myfilemanager.core.clipboard import ClipboardStager, unique_paths
from myfilemanager.core.errors import EngineContractError
from myfilemanager.core.models import ClipboardMode


@pytest.fixture
def paths(temp_tree):
    return [str(temp_tree["src"] / "file1.txt"), str(temp_tree["src"] / "file2.py")]


class TestStage:
    def test_stage_and_take(self, paths):
        stager = ClipboardStager()
        stager.stage(paths, ClipboardMode.COPY)
        payload = stager.take_payload()
        assert payload.paths == tuple(paths)
        assert payload.mode is ClipboardMode.COPY

    def test_take_clears(self, paths):
        stager = ClipboardStager()
        stager.stage(paths, ClipboardMode.CUT)
        assert stager.take_payload() is not None
        assert stager.take_payload() is None
        assert stager.empty

    def test_last_stage_wins(self, paths):
        stager = ClipboardStager()
        stager.stage(paths[:1], ClipboardMode.COPY)
        stager.stage(paths[1:], ClipboardMode.CUT)
        payload = stager.take_payload()
        assert payload.paths == tuple(paths[1:])
        assert payload.mode is ClipboardMode.CUT

    def test_peek_does_not_consume(self, paths):
        stager = ClipboardStager()
        stager.stage(paths, ClipboardMode.COPY)
        assert stager.peek() is not None
        assert stager.take_payload() is not None

    def test_clear(self, paths):
        stager = ClipboardStager()
        stager.stage(paths, ClipboardMode.COPY)
        stager.clear()
        assert stager.take_payload() is None

    def test_empty_selection_is_rejected(self):
        with pytest.raises(EngineContractError):
            ClipboardStager().stage([], ClipboardMode.COPY)

    def test_mode_must_be_a_clipboard_mode(self, paths):
        with pytest.raises(EngineContractError):
            ClipboardStager().stage(paths, "copy")

    def test_concurrent_takes_consume_once(self, paths):
        stager = ClipboardStager()
        stager.stage(paths, ClipboardMode.CUT)
        results = []
        barrier = threading.Barrier(8)

        def take():
            barrier.wait()
            results.append(stager.take_payload())

        threads = [threading.Thread(target=take) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sum(1 for r in results if r is not None) == 1


class TestUniquePaths:
    def test_keeps_first_occurrence_order(self, tmp_path):
        a, b = str(tmp_path / "a"), str(tmp_path / "b")
        assert unique_paths([b, a, b]) == [b, a]

    def test_normalises(self, tmp_path):
        assert unique_paths([str(tmp_path / "x" / ".." / "a")]) == [str(tmp_path / "a")]
