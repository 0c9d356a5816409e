"""Tests for operator decision providers."""

import io

import pytest

from acquisition.decisions import (
    ConsoleDecisionProvider,
    NonInteractiveDecisionProvider,
    ScriptedDecisionProvider,
)
from acquisition.models import AcquisitionChoice, DownloadKind
from maven.models import Coordinate

COORD = Coordinate("org.acme", "widget", "1.0")


def _console(text):
    out = io.StringIO()
    return ConsoleDecisionProvider(io.StringIO(text), out), out


class TestConsoleDecisionProvider:
    """Numbered menu and y/N confirmation."""

    @pytest.mark.parametrize("answer, expected", [
        ("1\n", AcquisitionChoice.SOURCES),
        ("2\n", AcquisitionChoice.MAIN),
        ("3\n", AcquisitionChoice.BOTH),
        ("4\n", AcquisitionChoice.SKIP),
        ("5\n", AcquisitionChoice.OFFLINE),
        (" 2 \n", AcquisitionChoice.MAIN),
    ])
    def test_menu_choices(self, answer, expected):
        provider, _ = _console(answer)
        assert provider.choose_strategy(COORD) is expected

    def test_invalid_choice_defaults_to_sources(self):
        provider, out = _console("banana\n")
        assert provider.choose_strategy(COORD) is AcquisitionChoice.SOURCES
        assert "Defaulting to sources" in out.getvalue()

    def test_end_of_input_skips(self):
        provider, _ = _console("")
        assert provider.choose_strategy(COORD) is AcquisitionChoice.SKIP

    def test_menu_written_to_output_stream(self):
        provider, out = _console("1\n")
        provider.choose_strategy(COORD)
        text = out.getvalue()
        assert "org.acme:widget:1.0" in text
        assert "1. Download sources JAR" in text
        assert "5. Enter offline mode" in text

    @pytest.mark.parametrize("answer, expected", [
        ("y\n", True),
        ("YES\n", True),
        ("n\n", False),
        ("\n", False),
        ("", False),
    ])
    def test_confirmation(self, answer, expected):
        provider, out = _console(answer)
        assert provider.confirm_download(COORD, DownloadKind.SOURCES) is expected
        assert "Continue? (y/N)" in out.getvalue()

    def test_progress_lines(self):
        provider, out = _console("")
        provider.report_progress(COORD, DownloadKind.MAIN, "completed")
        assert out.getvalue() == "Completed main JAR for org.acme:widget:1.0\n"


class TestScriptedDecisionProvider:
    """Queued answers and call recording."""

    def test_answers_in_order_and_records_calls(self):
        provider = ScriptedDecisionProvider(
            choices=[AcquisitionChoice.MAIN], confirmations=[False]
        )
        assert provider.choose_strategy(COORD) is AcquisitionChoice.MAIN
        assert provider.confirm_download(COORD, DownloadKind.MAIN) is False
        assert provider.calls == [
            ("choose_strategy", "org.acme:widget:1.0", "main"),
            ("confirm_download", "org.acme:widget:1.0", "main"),
        ]

    def test_exhausted_queues_use_defaults(self):
        provider = ScriptedDecisionProvider(default_confirm=True)
        assert provider.choose_strategy(COORD) is AcquisitionChoice.SKIP
        assert provider.confirm_download(COORD, DownloadKind.SOURCES) is True


class TestNonInteractiveDecisionProvider:
    def test_always_skips(self):
        provider = NonInteractiveDecisionProvider()
        assert provider.choose_strategy(COORD) is AcquisitionChoice.SKIP
        assert provider.confirm_download(COORD, DownloadKind.MAIN) is False
