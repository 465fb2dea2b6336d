"""Interactive questions, read from the controlling terminal.

Answers always come from /dev/tty rather than stdin, so the updater still
works when its standard input is a pipe.
"""

from __future__ import annotations

from typing import TextIO

import click

from .errors import NoTerminal
from .models import UserDecision

TTY_PATH = "/dev/tty"


class TerminalPrompter:
    """Ask yes/no style questions on the terminal.

    Args:
        reader: Stream answers are read from instead of /dev/tty.
        writer: Stream questions are written to instead of /dev/tty.
    """

    def __init__(
        self, reader: TextIO | None = None, writer: TextIO | None = None
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._tty: TextIO | None = None

    def _terminal(self) -> tuple[TextIO, TextIO]:
        if self._reader is None or self._writer is None:
            try:
                self._tty = open(TTY_PATH, "r+")
            except OSError as exc:
                raise NoTerminal(f"cannot open {TTY_PATH}: {exc.strerror}") from exc
            if self._reader is None:
                self._reader = self._tty
            if self._writer is None:
                self._writer = self._tty
        return self._reader, self._writer

    def ask(self, question: str) -> str:
        """Print ``question`` and return the raw answer line.

        Raises:
            click.Abort: On end-of-file (Ctrl-D).
        """
        reader, writer = self._terminal()
        click.echo(question, nl=False, file=writer)
        writer.flush()
        line = reader.readline()
        if not line:
            click.echo(file=writer)
            raise click.Abort()
        return line.rstrip("\r\n")

    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a y/n question; an empty answer returns ``default``."""
        hint = "(Y/n)" if default else "(y/N)"
        answer = self.ask(f"{question} {hint}: ").strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def decide(self, question: str) -> UserDecision:
        """Ask a Yes/No/Skip question; an empty answer means yes."""
        return UserDecision.parse(self.ask(f"{question} (Y/n/s) (Yes/No/Skip): "))

    def close(self) -> None:
        if self._tty is not None:
            self._tty.close()
            self._tty = None
