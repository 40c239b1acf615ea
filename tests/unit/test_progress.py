from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

from sheetcrm.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("sheetcrm.services.progress.is_tty_enabled", return_value=True), \
             patch("sheetcrm.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(5, description="Test files")
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Test files",
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("sheetcrm.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(5)
            assert tracker.enabled is False
            assert tracker.pbar is None
            # no-ops without a bar
            tracker.start_file(Path("a.csv"))
            tracker.set_postfix(rows=1)
            tracker.finish_file()
            tracker.close()
            assert tracker.current_file == 1

    def test_file_lifecycle_updates_bar(self):
        mock_pbar = Mock()
        with patch("sheetcrm.services.progress.is_tty_enabled", return_value=True), \
             patch("sheetcrm.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(2, description="Importing") as tracker:
                tracker.start_file(Path("/tmp/products.csv"))
                mock_pbar.set_description.assert_called_with("Importing (products.csv)")
                tracker.set_postfix(success=1)
                mock_pbar.set_postfix.assert_called_once_with(success=1)
                tracker.finish_file(success=True)
                mock_pbar.update.assert_called_once_with(1)
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
