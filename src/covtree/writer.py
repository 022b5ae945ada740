"""Scoped output destinations for report generators.

A :class:`FileWriter` is rooted at the report output directory and hands out
:class:`ContentWriter` objects for individual files, or for the console when
the destination is ``None`` or ``"-"``.
"""

from __future__ import annotations

import shutil
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from rich.console import Console
from rich.text import Text

from covtree._meta import logger
from covtree.errors import UnimplementedAbstractMethodError, WriterError
from covtree.types import WatermarkStatus

if TYPE_CHECKING:
    from collections.abc import Iterator

_STATUS_STYLES: dict[str, str] = {
    WatermarkStatus.LOW.value: "red",
    WatermarkStatus.MEDIUM.value: "yellow",
    WatermarkStatus.HIGH.value: "green",
}


class ContentWriter:
    """Base writer; subclasses implement :meth:`write`."""

    def write(self, text: str) -> None:
        msg = f"{type(self).__name__}.write must be overridden"
        raise UnimplementedAbstractMethodError(msg)

    def println(self, text: str = "") -> None:
        self.write(f"{text}\n")

    def colorize(self, text: str, status: WatermarkStatus | str | None) -> str:  # noqa: ARG002
        return text

    def close(self) -> None:
        """Release the destination."""


class FileContentWriter(ContentWriter):
    """Writes to an open text stream and closes it when done."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, text: str) -> None:
        self._stream.write(text)

    def close(self) -> None:
        self._stream.close()


class ConsoleWriter(ContentWriter):
    """Writes to standard output, colouring watermark classes when supported."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)

    def write(self, text: str) -> None:
        self._console.file.write(text)

    def colorize(self, text: str, status: WatermarkStatus | str | None) -> str:
        style = _STATUS_STYLES.get(str(status)) if status else None
        if style is None or self._console.color_system is None:
            return text
        with self._console.capture() as cap:
            self._console.print(Text(text, style=style), end="", soft_wrap=True)
        return cap.get()


class FileWriter:
    """Hands out content writers for paths below ``base_dir``."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)

    def _resolve(self, file: Path | str) -> Path:
        rel = Path(file)
        if rel.is_absolute():
            msg = f"cannot write to absolute path {rel}"
            raise WriterError(msg)
        target = (self.base_dir / rel).resolve()
        if not target.is_relative_to(self.base_dir.resolve()):
            msg = f"{rel} escapes the output directory {self.base_dir}"
            raise WriterError(msg)
        return target

    def write_for_dir(self, subdir: Path | str) -> FileWriter:
        """Return a writer rooted at ``subdir`` of this writer's directory."""
        return FileWriter(self._resolve(subdir))

    def copy_file(self, source: Path | str, dest: Path | str, header: str | None = None) -> None:
        target = self._resolve(dest)
        target.parent.mkdir(parents=True, exist_ok=True)
        if header is None:
            shutil.copyfile(source, target)
        else:
            content = Path(source).read_text(encoding="utf-8")
            target.write_text(header + content, encoding="utf-8")
        logger.debug("copied %s to %s", source, target)

    def write_file(self, file: Path | str | None) -> ContentWriter:
        """Return a writer for ``file``; ``None`` or ``"-"`` writes to the console."""
        if file is None or str(file) == "-":
            return ConsoleWriter(Console(file=sys.stdout, highlight=False))
        target = self._resolve(file)
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("writing %s", target)
        return FileContentWriter(target.open("w", encoding="utf-8"))

    @contextmanager
    def open(self, file: Path | str | None = None) -> Iterator[ContentWriter]:
        """Yield a writer for ``file`` and close it on exit."""
        writer = self.write_file(file)
        try:
            yield writer
        finally:
            writer.close()


__all__ = ["ConsoleWriter", "ContentWriter", "FileContentWriter", "FileWriter"]
