"""Operator decision capability used when an artifact is missing locally.

Console prompts are written to stderr (never stdout, which carries
structured results) and read from stdin.
"""
from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections import deque
from typing import IO, Iterable, List, Optional, Tuple

from maven.models import Coordinate

from .models import AcquisitionChoice, DownloadKind

_MENU = (
    ("1", AcquisitionChoice.SOURCES, "Download sources JAR (recommended for analysis)"),
    ("2", AcquisitionChoice.MAIN, "Download main JAR (compiled bytecode)"),
    ("3", AcquisitionChoice.BOTH, "Download both JARs"),
    ("4", AcquisitionChoice.SKIP, "Skip this dependency"),
    ("5", AcquisitionChoice.OFFLINE, "Enter offline mode (skip all downloads)"),
)


class DecisionProvider(ABC):
    """Answers the acquisition cascade's questions."""

    @abstractmethod
    def choose_strategy(self, coordinate: Coordinate) -> AcquisitionChoice:
        """Decide what to do about a coordinate with no local archive."""

    @abstractmethod
    def confirm_download(self, coordinate: Coordinate, kind: DownloadKind) -> bool:
        """Confirm one concrete download before it starts."""

    def report_progress(self, coordinate: Coordinate, kind: DownloadKind, status: str) -> None:
        """Status notification (starting, completed, failed). Silent by default."""


class ConsoleDecisionProvider(DecisionProvider):
    """Numbered-menu prompts on a console."""

    def __init__(self, input_stream: Optional[IO[str]] = None, output_stream: Optional[IO[str]] = None):
        self._in = input_stream if input_stream is not None else sys.stdin
        self._out = output_stream if output_stream is not None else sys.stderr

    def choose_strategy(self, coordinate: Coordinate) -> AcquisitionChoice:
        self._write(f"\nDependency not found locally: {coordinate.key}")
        self._write("What would you like to do?")
        for number, _, label in _MENU:
            self._write(f"{number}. {label}")
        answer = self._ask("Enter your choice (1-5): ")
        if answer is None:
            self._write("No input available. Skipping.")
            return AcquisitionChoice.SKIP
        for number, choice, _ in _MENU:
            if answer.strip() == number:
                return choice
        self._write("Invalid choice. Defaulting to sources JAR.")
        return AcquisitionChoice.SOURCES

    def confirm_download(self, coordinate: Coordinate, kind: DownloadKind) -> bool:
        self._write(f"\nAbout to download {kind.value} JAR for {coordinate.key}")
        answer = self._ask("Continue? (y/N): ")
        return answer is not None and answer.strip().lower() in ("y", "yes")

    def report_progress(self, coordinate: Coordinate, kind: DownloadKind, status: str) -> None:
        self._write(f"{status.capitalize()} {kind.value} JAR for {coordinate.key}")

    def _write(self, line: str) -> None:
        self._out.write(line + "\n")
        self._out.flush()

    def _ask(self, question: str) -> Optional[str]:
        """Prompt and read one line; None at end of input."""
        self._out.write(question)
        self._out.flush()
        line = self._in.readline()
        if not line:
            return None
        return line.rstrip("\n")


class ScriptedDecisionProvider(DecisionProvider):
    """Deterministic answers for tests and non-interactive callers.

    Queued choices are consumed in order (SKIP once exhausted); queued
    confirmations likewise (``default_confirm`` once exhausted). Every call
    is recorded in ``calls``.
    """

    def __init__(
        self,
        choices: Iterable[AcquisitionChoice] = (),
        confirmations: Iterable[bool] = (),
        default_confirm: bool = True,
    ):
        self._choices = deque(choices)
        self._confirmations = deque(confirmations)
        self._default_confirm = default_confirm
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    def choose_strategy(self, coordinate: Coordinate) -> AcquisitionChoice:
        choice = self._choices.popleft() if self._choices else AcquisitionChoice.SKIP
        self.calls.append(("choose_strategy", coordinate.key, choice.value))
        return choice

    def confirm_download(self, coordinate: Coordinate, kind: DownloadKind) -> bool:
        answer = self._confirmations.popleft() if self._confirmations else self._default_confirm
        self.calls.append(("confirm_download", coordinate.key, kind.value))
        return answer


class NonInteractiveDecisionProvider(DecisionProvider):
    """Never downloads: every missing artifact is skipped."""

    def choose_strategy(self, coordinate: Coordinate) -> AcquisitionChoice:
        return AcquisitionChoice.SKIP

    def confirm_download(self, coordinate: Coordinate, kind: DownloadKind) -> bool:
        return False
