"""Error reporting for the command line: printers, error details and flag hints."""

from __future__ import annotations

import abc
import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

_RESET = "\x1b[0m"
_FG_RED = "31"
_FG_YELLOW = "33"
_FG_BRIGHT_WHITE = "97"
_BG_RED = "41"
_BG_YELLOW = "43"


def _supports_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (OSError, ValueError):
        return False


def _style(stream: TextIO, text: str, *codes: str) -> str:
    if not codes or not _supports_color(stream):
        return text
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


class Printer(abc.ABC):
    """Something that prints a piece of an error report."""

    @abc.abstractmethod
    def print(self, stream: TextIO) -> None:
        """Write this piece to ``stream``."""


@dataclass(frozen=True)
class ColoredBox(Printer):
    """A highlighted ``prefix:`` followed by a coloured message."""

    prefix: str
    text: str

    def print(self, stream: TextIO) -> None:
        prefix = _style(stream, self.prefix + ":", _BG_RED, _FG_BRIGHT_WHITE)
        message = _style(stream, self.text, _FG_RED)
        stream.write(f"{prefix} {message}\n")


@dataclass(frozen=True)
class Paragraph(Printer):
    """A line of plain text."""

    text: str

    def print(self, stream: TextIO) -> None:
        stream.write(self.text + "\n")


@dataclass(frozen=True)
class CodeBlock(Printer):
    """A line of code, indented by four spaces."""

    code: str

    def print(self, stream: TextIO) -> None:
        stream.write(f"    {self.code}\n")


class CLIError(Exception):
    """An error with extra printers that explain it to the user."""

    def __init__(self, cause: Exception | str, *printers: Printer) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.printers: tuple[Printer, ...] = printers

    def print_details(self, stream: TextIO) -> None:
        """Write the error box followed by all explaining printers."""
        for printer in (ColoredBox("error", str(self.cause)), *self.printers):
            stream.write("\n")
            printer.print(stream)
        stream.write("\n")


def print_error(stream: TextIO, err: BaseException | None) -> None:
    """Write the details of ``err`` to ``stream``; nothing if it is None."""
    if err is None:
        return
    cli_error = err if isinstance(err, CLIError) else CLIError(err)
    cli_error.print_details(stream)


def print_warning(stream: TextIO, err: BaseException | None) -> None:
    """Write a highlighted warning to ``stream``; nothing if it is None."""
    if err is None:
        return
    prefix = _style(stream, "warning:", _BG_YELLOW, _FG_BRIGHT_WHITE)
    message = _style(stream, str(err), _FG_YELLOW)
    stream.write(f"\n{prefix} {message}\n\n")


def format_flag(name: str) -> str:
    """Spell a flag the way a user types it: ``-v`` or ``--version``."""
    return "-" + name if len(name) == 1 else "--" + name


def levenshtein(a: str, b: str) -> int:
    """The edit distance between two strings, counted in characters."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def suggest_flag(unknown_flag: str, known_flags: Iterable[str]) -> str | None:
    """The known flag closest to ``unknown_flag``, or None if none is close enough."""
    closest_distance = 10000
    closest_flag = None
    for name in sorted(known_flags):
        distance = levenshtein(name, unknown_flag)
        if distance < closest_distance:
            closest_distance = distance
            closest_flag = name

    if closest_flag is None:
        return None
    if closest_distance >= len(unknown_flag):
        return None
    if closest_distance > 4:
        return None
    return closest_flag


def unknown_flag_error(flag_name: str, known_flags: Iterable[str]) -> CLIError:
    """Build the error for an undefined flag, with a suggestion where one fits."""
    message = f"unknown flag: {format_flag(flag_name)}"
    alternative = suggest_flag(flag_name, known_flags)
    if alternative is None:
        return CLIError(message)
    return CLIError(
        message,
        Paragraph(f"Did you mean {format_flag(alternative)} instead?"),
    )