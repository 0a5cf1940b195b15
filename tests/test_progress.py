"""test suite for progress manager."""
import io
import pytest
from pathlib import Path
import sys
from unittest.mock import Mock, patch

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console

from gitea_resource.ui.progress import ProgressManager, _DummyProgress


class TestProgressManager:
    """test progress manager functionality."""

    def test_initialization_default(self):
        """test progress manager writes to stderr by default."""
        pm = ProgressManager()
        assert pm.console.stderr is True

    def test_initialization_custom_console(self):
        """test progress manager accepts custom console."""
        custom_console = Console()
        pm = ProgressManager(console=custom_console)
        assert pm.console is custom_console

    def test_tty_detection_interactive(self):
        """test bars are enabled when stderr is a terminal."""
        with patch('sys.stderr.isatty', return_value=True):
            pm = ProgressManager()
            assert pm._enabled is True

    def test_tty_detection_non_interactive(self):
        """test bars are disabled on ci workers."""
        with patch('sys.stderr.isatty', return_value=False):
            pm = ProgressManager()
            assert pm._enabled is False

    def test_print_method(self):
        """test print delegates to console without highlighting."""
        mock_console = Mock(spec=Console)
        pm = ProgressManager(console=mock_console)

        pm.print("Fetching app.tar.gz")
        mock_console.print.assert_called_once_with("Fetching app.tar.gz", highlight=False)

    def test_print_escapes_markup(self):
        """test file names with brackets are printed literally."""
        mock_console = Mock(spec=Console)
        pm = ProgressManager(console=mock_console)

        pm.print("Uploading [red]x.txt")
        printed = mock_console.print.call_args.args[0]
        assert printed == "Uploading \\[red]x.txt"

    def test_transfer_context_interactive(self):
        """test transfer context yields a real progress and task."""
        pm = ProgressManager(console=Console(file=io.StringIO()))
        pm._enabled = True

        with pm.transfer("app.tar.gz") as (progress, task_id):
            assert task_id is not None
            progress.update(task_id, total=10)
            progress.update(task_id, completed=10)

    def test_transfer_context_non_interactive(self):
        """test transfer context is a no-op on ci workers."""
        mock_console = Mock(spec=Console)
        pm = ProgressManager(console=mock_console)
        pm._enabled = False

        with pm.transfer("app.tar.gz") as (progress, task_id):
            assert isinstance(progress, _DummyProgress)
            assert task_id is None

        mock_console.print.assert_not_called()


class TestDummyProgress:
    """test dummy progress fallback."""

    def test_update(self):
        dp = _DummyProgress()
        # should not raise
        dp.update(None, total=10)
        dp.update(None, completed=5)

    def test_only_exposes_update(self):
        # the client only ever calls update on a progress object
        assert not hasattr(_DummyProgress(), "add_task")
        assert not hasattr(_DummyProgress(), "advance")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
