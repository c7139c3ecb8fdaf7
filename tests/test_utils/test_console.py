from __future__ import annotations

import io
import sys
import threading
from typing import Generator, List
from unittest.mock import MagicMock, patch

import pytest
from rich.table import Table
from rich.console import Console

from rubigo.exceptions import InteractionError
from rubigo.utils.console import (
    RUBIGO_THEME,
    Interaction,
    _get_console,
    _should_use_color,
    colorize_update_type,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Reset console singleton before and after each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that affect console behavior."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


def _interaction(*answers: str) -> Interaction:
    """Build an Interaction that replays ``answers`` and renders to a buffer."""
    replies: List[str] = list(answers)
    console = Console(file=io.StringIO(), no_color=True)
    return Interaction(console=console, input_func=lambda: replies.pop(0))


def _output(interaction: Interaction) -> str:
    return interaction.console.file.getvalue()


@pytest.mark.unit
class TestThemeConfiguration:
    """Tests for RUBIGO_THEME."""

    @pytest.mark.parametrize("style_name", ["success", "error", "warning", "info", "dim", "highlight"])
    def test_theme_has_required_styles(self, style_name: str) -> None:
        assert style_name in RUBIGO_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for _should_use_color."""

    def test_no_color_env_disables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_ci_env_disables_color(self, clean_env: None, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CI", "true")

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_tty_enables_color(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True

    def test_isatty_raises(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", side_effect=OSError("closed")):
            assert _should_use_color() is False


@pytest.mark.unit
class TestGetConsole:
    """Tests for the console singleton."""

    def test_singleton_returns_same_instance(self) -> None:
        assert _get_console() is _get_console()

    def test_reconfigure_clears_console(self) -> None:
        first = _get_console()

        reconfigure_console()

        assert _get_console() is not first

    def test_thread_safety(self) -> None:
        """Test concurrent first calls share one instance."""
        consoles: List[Console] = []

        def grab() -> None:
            consoles.append(_get_console())

        threads = [threading.Thread(target=grab) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(console) for console in consoles}) == 1


@pytest.mark.unit
class TestStatusMessages:
    """Tests for print_success, print_error and print_warning."""

    @pytest.mark.parametrize(
        "func,prefix,style",
        [
            (print_success, "[OK]", "success"),
            (print_error, "[ERROR]", "error"),
            (print_warning, "[WARNING]", "warning"),
        ],
    )
    def test_prefix_and_style(self, func, prefix: str, style: str) -> None:
        with patch.object(Console, "print") as mock_print:
            func("github.com/a/b ~1.0.0")

        mock_print.assert_called_once_with(
            f"{prefix} github.com/a/b ~1.0.0", style=style, markup=False
        )

    def test_custom_prefix(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_success("Done", prefix="*")

        mock_print.assert_called_once_with("* Done", style="success", markup=False)


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table structured output."""

    def test_prints_table(self) -> None:
        data = [
            {"Package": "github.com/a/b", "Version": "~1.0.0"},
            {"Package": "golang.org/x/net", "Version": "master"},
        ]

        with patch.object(Console, "print") as mock_print:
            print_table(data, title="Locked Packages")

        table = mock_print.call_args[0][0]
        assert isinstance(table, Table)
        assert table.title == "Locked Packages"
        assert [column.header for column in table.columns] == ["Package", "Version"]
        assert table.row_count == 2

    def test_empty_data_prints_nothing(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([])

        mock_print.assert_not_called()

    def test_custom_headers(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([{"a": "1", "b": "2"}], headers=["b"])

        table = mock_print.call_args[0][0]
        assert [column.header for column in table.columns] == ["b"]


@pytest.mark.unit
class TestColorizeUpdateType:
    """Tests for colorize_update_type."""

    @pytest.mark.parametrize(
        "update_type,expected",
        [
            ("major", "[red]major[/red]"),
            ("minor", "[yellow]minor[/yellow]"),
            ("patch", "[green]patch[/green]"),
            ("new", "[cyan]new[/cyan]"),
            ("MAJOR", "[red]MAJOR[/red]"),
            ("unknown", "unknown"),
        ],
    )
    def test_colors(self, update_type: str, expected: str) -> None:
        assert colorize_update_type(update_type) == expected


@pytest.mark.unit
class TestInteractionAsk:
    """Tests for Interaction.ask."""

    def test_returns_raw_line(self) -> None:
        interaction = _interaction("  2 ")

        assert interaction.ask("Choose:") == "  2 "
        assert "Choose:" in _output(interaction)

    def test_prompt_is_not_markup(self) -> None:
        """Test brackets in the prompt are printed literally."""
        interaction = _interaction("")

        interaction.ask("[1] Tilde (Patch): ~1.0.0")

        assert "[1] Tilde (Patch): ~1.0.0" in _output(interaction)

    @pytest.mark.parametrize("error", [EOFError(), OSError("bad fd")])
    def test_unreadable_input(self, error: Exception) -> None:
        """Test a closed or broken stdin raises InteractionError."""
        interaction = Interaction(
            console=Console(file=io.StringIO()),
            input_func=MagicMock(side_effect=error),
        )

        with pytest.raises(InteractionError):
            interaction.ask("Choose:")

    def test_reads_are_serialized(self) -> None:
        """Test two threads never read at the same time."""
        active = []
        overlap = []

        def slow_input() -> str:
            active.append(1)
            if len(active) > 1:
                overlap.append(True)
            threading.Event().wait(0.01)
            active.pop()
            return "1"

        interaction = Interaction(console=Console(file=io.StringIO()), input_func=slow_input)
        threads = [threading.Thread(target=interaction.ask, args=("?",)) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlap == []


@pytest.mark.unit
class TestInteractionConfirm:
    """Tests for Interaction.confirm."""

    @pytest.mark.parametrize("answer", ["y", "Y", "yes", " yes ", "yep"])
    def test_yes(self, answer: str) -> None:
        assert _interaction(answer).confirm("Remove?") is True

    @pytest.mark.parametrize("answer", ["n", "no", "NO"])
    def test_no(self, answer: str) -> None:
        assert _interaction(answer).confirm("Remove?", default=True) is False

    @pytest.mark.parametrize("default", [True, False])
    def test_empty_or_invalid_uses_default(self, default: bool) -> None:
        assert _interaction("").confirm("Remove?", default=default) is default
        assert _interaction("maybe").confirm("Remove?", default=default) is default

    def test_prompt_format(self) -> None:
        interaction = _interaction("")

        interaction.confirm("Remove github.com/a/b?")

        assert "Remove github.com/a/b? [y/N]:" in _output(interaction)
