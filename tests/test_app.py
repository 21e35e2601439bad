"""Tests for the application's batch bookkeeping (no terminal needed)."""
from myfilemanager.core.config import Config
from myfilemanager.main import MyFileManager


class TestBatchTokens:
    def test_superseded_batch_keeps_the_newer_token(self, tmp_path):
        app = MyFileManager(config=Config(config_dir=tmp_path))
        first = app._begin_batch()
        second = app._begin_batch()

        app._end_batch(first)
        assert app._cancel is second

        app._end_batch(second)
        assert app._cancel is None

    def test_cancel_reaches_the_running_batch(self, tmp_path):
        app = MyFileManager(config=Config(config_dir=tmp_path))
        app._end_batch(app._begin_batch())
        running = app._begin_batch()

        app._cancel.cancel()
        assert running.cancelled
