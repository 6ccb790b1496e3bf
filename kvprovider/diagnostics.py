"""An error type that carries a source, a reason and a user-facing message."""

from __future__ import annotations

import json
import re
from typing import TextIO

_LINE_BREAK = re.compile(r"\r?\n")


def _root_cause(err: BaseException | None) -> BaseException | None:
    while err is not None and err.__cause__ is not None:
        err = err.__cause__
    return err


class DiagnosticError(Exception):
    """An error annotated with where it came from and why it happened.

    ``str()`` gives ``error(<reason>) from <source>: <message>: <cause>``.
    """

    def __init__(
        self,
        reason: str,
        message: str = "",
        source: str = "",
        orig: BaseException | None = None,
    ) -> None:
        super().__init__(reason, message, source, orig)
        self.reason = reason
        self.message = message
        self.source = source
        self.orig = orig
        self.__cause__ = orig

    def __str__(self) -> str:
        if self.source:
            text = f"error({self.reason}) from {self.source}"
        else:
            text = f"error({self.reason})"
        message = self.message.strip()
        if message:
            text += ": " + _LINE_BREAK.sub(" ", message)
        cause = _root_cause(self.orig)
        if cause is not None:
            text += f": {cause}"
        return text

    def write_to(self, stream: TextIO) -> None:
        """Write a sectioned, more verbose description of the error."""
        stream.write(f"Error from {json.dumps(self.source, ensure_ascii=False)}\n")
        stream.write(f"Reason: {self.reason}\n")
        if self.message:
            stream.write("\nMessage:\n")
            stream.write(f"{self.message}\n")
        stream.write("\nOriginal error:\n")
        stream.write(f"{self.orig}\n")