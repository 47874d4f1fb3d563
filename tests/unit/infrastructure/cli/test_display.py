import pytest
from unittest.mock import MagicMock

from rich.box import HEAVY, SIMPLE
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from reactivecache.domain.models.reply import Reply, Source
from reactivecache.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    return ConsoleDisplay(console=mock_console)


def printed(mock_console: MagicMock):
    mock_console.print.assert_called_once()
    args, _ = mock_console.print.call_args
    assert len(args) == 1
    return args[0]


def test_display_output_plain_value(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Plain values are printed as unstyled text."""
    console_display.display_output({"id": 42}, title="user:42")
    renderable = printed(mock_console)
    assert isinstance(renderable, Text)
    assert renderable.plain == "{'id': 42}"


def test_display_output_reply(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Replies are shown as a table with their provenance."""
    reply = Reply(data="Alice", source=Source.PERSISTENCE, encrypted=False, stale=True)
    console_display.display_output(reply, title="user:42")
    table = printed(mock_console)
    assert isinstance(table, Table)
    assert table.title == "user:42"
    assert table.row_count == 5
    fields = list(table.columns[0].cells)
    values = list(table.columns[1].cells)
    assert dict(zip(fields, values)) == {
        "data": "Alice",
        "source": "persistence",
        "from cache": "yes",
        "stale": "yes",
        "encrypted": "no",
    }


def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Errors are shown in a heavy red panel."""
    console_display.display_error("Something went wrong")
    panel = printed(mock_console)
    assert isinstance(panel, Panel)
    assert panel.box is HEAVY
    assert panel.border_style == "red"
    assert panel.renderable.plain == "Something went wrong"


@pytest.mark.parametrize("method, color", [
    ("display_info", "blue"),
    ("display_warning", "yellow"),
])
def test_display_info_and_warning(console_display: ConsoleDisplay, mock_console: MagicMock, method, color):
    getattr(console_display, method)("Process completed")
    panel = printed(mock_console)
    assert panel.box is SIMPLE
    assert panel.border_style == color
    assert panel.renderable.plain == "Process completed"


def test_display_keys(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_keys(["b", "a"])
    table = printed(mock_console)
    assert list(table.columns[1].cells) == ["a", "b"]


def test_display_keys_empty(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_keys([])
    panel = printed(mock_console)
    assert panel.renderable.plain == "No cached keys."
