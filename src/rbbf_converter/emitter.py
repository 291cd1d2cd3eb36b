"""
Output sequencing around the project version.

The root element of the XML document carries the project version as an attribute, but the version only becomes known
when the ``PSIV`` field of the Project block is decoded, long after the root element has been produced. The
`DeferredVersionEmitter` deals with this in two phases:

- `EmitterState.BUFFERING`: lines are kept, in order, in memory. They may contain `VERSION_PLACEHOLDER`.
- `EmitterState.FLUSHED`: entered by `resolve_version()`. The placeholder is substituted in every buffered line, the
  lines are written to the sink, and from then on every line goes straight to the sink.
"""

import logging

from enum import Enum, auto
from typing import List, Optional

from .output import OutputSink
from .version import FALLBACK_VERSION


LOG = logging.getLogger(__name__)

VERSION_PLACEHOLDER = '"(mVersion)"'


class EmitterState(Enum):
    BUFFERING = auto()
    FLUSHED = auto()


class DeferredVersionEmitter:
    _sink: OutputSink
    _state: EmitterState
    _buffered_lines: List[str]
    _version: Optional[str] = None
    _fallback_version: str

    def __init__(self, sink: OutputSink, fallback_version: str = FALLBACK_VERSION):
        self._sink = sink
        self._state = EmitterState.BUFFERING
        self._buffered_lines = []
        self._fallback_version = fallback_version

    @property
    def state(self) -> EmitterState:
        return self._state

    @property
    def version(self) -> Optional[str]:
        """The resolved version, or None while still buffering."""
        return self._version

    @property
    def n_buffered_lines(self) -> int:
        return len(self._buffered_lines)

    def write_line(self, line: str):
        if self._state == EmitterState.BUFFERING:
            self._buffered_lines.append(line)
        else:
            self._sink.write_line(line)

    def resolve_version(self, version: str) -> bool:
        """
        Signals that the project version has been discovered, flushing all buffered lines.

        Returns:
            True if this call resolved the version, False if it had already been resolved before (in which case the
            call has no effect).
        """
        if self._state != EmitterState.BUFFERING:
            LOG.debug(f"Ignoring version {version!r}, version was already resolved as {self._version!r}")
            return False

        self._version = version
        self._state = EmitterState.FLUSHED

        LOG.debug(f"Project version resolved as {version!r}, flushing {len(self._buffered_lines)} buffered lines")

        quoted_version = f'"{version}"'
        for line in self._buffered_lines:
            self._sink.write_line(line.replace(VERSION_PLACEHOLDER, quoted_version))

        self._buffered_lines = []

        return True

    def resolve_fallback_version(self) -> bool:
        if self._state != EmitterState.BUFFERING:
            return False

        LOG.info(f"Project version not found, using fallback version {self._fallback_version!r}")

        return self.resolve_version(self._fallback_version)

    def finish(self):
        """
        Ends the output. If the version was never discovered, the fallback version is used so that all buffered
        output reaches the sink.
        """
        self.resolve_fallback_version()
