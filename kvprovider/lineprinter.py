"""Line-buffered writers that hand complete lines to a print callable."""

from __future__ import annotations

import threading
from typing import Any, Callable

PrintFunc = Callable[..., Any]


class LinePrinter:
    """A writable sink that forwards newline-terminated lines to ``print_func``.

    Partial lines stay buffered until more data completes them or the
    printer is closed, at which point the remainder is printed as well.
    """

    def __init__(self, print_func: PrintFunc) -> None:
        self.print_func = print_func
        self._buffer = bytearray()
        self._lock = threading.Lock()

    def write(self, data: bytes | bytearray | str) -> int:
        """Buffer ``data`` and print every complete line it holds."""
        chunk = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        with self._lock:
            self._buffer += chunk
            while (end := self._buffer.find(b"\n")) != -1:
                line = bytes(self._buffer[: end + 1])
                del self._buffer[: end + 1]
                self.print_func(line.decode("utf-8", errors="replace"))
        return len(data)

    def close(self) -> None:
        """Print whatever is left in the buffer."""
        with self._lock:
            if self._buffer:
                line = bytes(self._buffer)
                self._buffer.clear()
                self.print_func(line.decode("utf-8", errors="replace"))

    def __enter__(self) -> "LinePrinter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Trimmer:
    """Wraps a print callable, stripping trailing newlines from a final string argument."""

    def __init__(self, wrapped_print: PrintFunc) -> None:
        self.wrapped_print = wrapped_print

    def print(self, *args: Any) -> None:
        """Trim the last argument if it is a string and pass everything on."""
        values = list(args)
        if values and isinstance(values[-1], str):
            values[-1] = values[-1].rstrip("\n")
        self.wrapped_print(*values)