import pytest
from unittest.mock import MagicMock
from rich.console import Console
from rich.panel import Panel

from workcache.domain.models.cache import CacheStats, FileInfo
from workcache.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def recording_display():
    """A display writing to an in-memory console."""
    return ConsoleDisplay(console=Console(record=True, width=120, force_terminal=False))


@pytest.fixture
def mock_console():
    return MagicMock(spec=Console)


def test_display_output_renders_json(recording_display):
    recording_display.display_output({"id": 42, "title": "Fix login"}, title="workitems:42")
    text = recording_display.console.export_text()
    assert "workitems:42" in text
    assert '"title": "Fix login"' in text


def test_display_stats_renders_all_rows(recording_display):
    stats = CacheStats(
        total_files=2,
        total_size=2048,
        max_size=4096,
        oldest_file=FileInfo(path="/cache/general/a.json", mtime=0.0),
        newest_file=FileInfo(path="/cache/general/b.json", mtime=60.0),
        hits=3,
        misses=1,
        pending_preloads=4,
    )
    recording_display.display_stats(stats)
    text = recording_display.console.export_text()
    assert "Entries" in text
    assert "50% of 4096 bytes" in text
    assert "/cache/general/a.json" in text
    assert "3 / 1 (75.00%)" in text
    assert "Pending preloads" in text


def test_display_keys_empty_shows_info(recording_display):
    recording_display.display_keys("Pending workitems preloads", [])
    assert "Pending workitems preloads: none" in recording_display.console.export_text()


def test_display_keys_lists_each_key(recording_display):
    recording_display.display_keys("Pending", ["9", "11"])
    text = recording_display.console.export_text()
    assert "9" in text and "11" in text


def test_display_error_uses_panel(mock_console):
    display = ConsoleDisplay(console=mock_console)
    display.display_error("Something broke")
    mock_console.print.assert_called_once()
    panel = mock_console.print.call_args[0][0]
    assert isinstance(panel, Panel)
    assert "Error" in panel.title


def test_display_warning_and_info(mock_console):
    display = ConsoleDisplay(console=mock_console)
    display.display_warning("Careful")
    display.display_info("FYI")
    titles = [call[0][0].title for call in mock_console.print.call_args_list]
    assert "Warning" in titles[0]
    assert "Info" in titles[1]


@pytest.mark.parametrize("answer, expected", [("y", True), ("YES", True), ("n", False), ("", False)])
def test_confirm(mock_console, answer, expected):
    mock_console.input.return_value = answer
    display = ConsoleDisplay(console=mock_console)
    assert display.confirm("Clear everything?") is expected
    mock_console.input.assert_called_once()
