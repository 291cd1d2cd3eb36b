"""
Abstractions for the destination of the generated XML text.

The converter only ever writes whole lines to an `OutputSink`. Where those lines end up is decided by the caller:

- `ConsoleOutputSink`: a text stream, by default the process's standard output
- `FileOutputSink`: a newly created file on the local filesystem
- `MemoryOutputSink`: a list of lines kept in memory, mostly useful for tests and embedding

A friendlier way to specify a destination is `OutputDestination`, which `resolve_output_sink` turns into a sink:

- `None`: the console
- `PurePath` | `str`: a file at that location (a blank string also means the console)
- `list`: an in-memory list that receives the lines
- `TextIO`: an already open text stream
- `OutputSink`: an already resolved sink
"""

import sys

from abc import ABCMeta, abstractmethod
from functools import singledispatch
from io import TextIOBase
from pathlib import PurePath, Path
from typing import List, Optional, TextIO, Union


OutputDestination = Union[None, PurePath, str, List[str], TextIO, 'OutputSink']


class OutputSink(metaclass=ABCMeta):
    """
    Canonical interface for a line-oriented text destination.

    Sinks can be used as context managers; the file-based sink closes its file on exit, the others leave the
    underlying stream to the caller.
    """

    @abstractmethod
    def write_line(self, line: str):
        """Writes a line of text. The line terminator is added by the sink."""
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self) -> 'OutputSink':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ConsoleOutputSink(OutputSink):
    _stream: Optional[TextIO]

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Looked up late so that redirections of sys.stdout done after construction are honored
        return self._stream if self._stream is not None else sys.stdout

    def write_line(self, line: str):
        self.stream.write(line)
        self.stream.write('\n')

    def close(self):
        self.stream.flush()


class FileOutputSink(OutputSink):
    """
    Writes to a file, which is created anew (any existing file at that location is replaced). Output is always UTF-8
    with ``\\n`` line endings, regardless of platform.
    """

    _path: Path
    _fileobj: Optional[TextIO] = None

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write_line(self, line: str):
        if self._fileobj is None:
            self._fileobj = self._path.open('w', encoding='utf-8', newline='\n')

        self._fileobj.write(line)
        self._fileobj.write('\n')

    def close(self):
        if self._fileobj is not None:
            self._fileobj.close()
            self._fileobj = None


class MemoryOutputSink(OutputSink):
    _lines: List[str]

    def __init__(self, lines: Optional[List[str]] = None):
        self._lines = lines if lines is not None else []

    @property
    def lines(self) -> List[str]:
        return self._lines

    def text(self) -> str:
        return ''.join(line + '\n' for line in self._lines)

    def write_line(self, line: str):
        self._lines.append(line)


@singledispatch
def resolve_output_sink(dest: OutputDestination) -> OutputSink:
    raise TypeError(f"Cannot resolve output destination of type {dest.__class__.__name__}")


@resolve_output_sink.register(type(None))
def _(dest) -> OutputSink:
    return ConsoleOutputSink()


@resolve_output_sink.register
def _(dest: PurePath) -> OutputSink:
    return FileOutputSink(Path(dest))


@resolve_output_sink.register
def _(dest: str) -> OutputSink:
    if dest.strip() == '':
        return ConsoleOutputSink()

    return FileOutputSink(Path(dest))


@resolve_output_sink.register
def _(dest: list) -> OutputSink:
    return MemoryOutputSink(dest)


@resolve_output_sink.register
def _(dest: TextIOBase) -> OutputSink:
    return ConsoleOutputSink(dest)


@resolve_output_sink.register
def _(dest: OutputSink) -> OutputSink:
    return dest
