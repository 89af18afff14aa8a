"""Status sinks the post-processor reports progress and errors to."""

from abc import ABC, abstractmethod
from typing import List, Tuple

import click


class Ui(ABC):
    """User-facing status sink supplied by the build host."""

    @abstractmethod
    def say(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass


class ConsoleUi(Ui):
    """Writes status lines to stderr through click; stdout is left for results."""

    def __init__(self, prefix: str = "ebstpm"):
        self.prefix = prefix

    def say(self, message: str) -> None:
        click.echo(click.style(f"==> {self.prefix}: {message}", bold=True), err=True)

    def error(self, message: str) -> None:
        click.echo(click.style(f"==> {self.prefix}: {message}", fg="red"), err=True)


class RecordingUi(Ui):
    """Keeps every status line in memory, in order."""

    def __init__(self):
        self.lines: List[Tuple[str, str]] = []

    def say(self, message: str) -> None:
        self.lines.append(("say", message))

    def error(self, message: str) -> None:
        self.lines.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [text for kind, text in self.lines if kind == "error"]
