"""
Colored status messages for the ``rbbf2xml`` command.

Progress and success messages go to stdout, warnings and errors to stderr. When the XML document itself is written to
stdout, call `Console.pipe_mode` so that the stdout messages are dropped and the document stays clean.
"""

import sys

from typing import Optional, TextIO

import colorama

from termcolor import cprint


class Console:
    _stdout_enabled: bool = True

    def print_progress(self, message: str) -> 'Console':
        return self._print(message, None, sys.stdout)

    def print_success(self, message: str) -> 'Console':
        return self._print(message, 'green', sys.stdout)

    def print_warning(self, message: str) -> 'Console':
        return self._print(message, 'yellow', sys.stderr)

    def print_error(self, message: str) -> 'Console':
        return self._print(message, 'red', sys.stderr)

    def pipe_mode(self) -> 'Console':
        self._stdout_enabled = False
        return self

    def enable_stdout(self) -> 'Console':
        self._stdout_enabled = True
        return self

    def _print(self, message: str, color: Optional[str], channel: TextIO) -> 'Console':
        if (channel is sys.stdout) and not self._stdout_enabled:
            return self

        if color is None:
            print(message, file=channel)
        else:
            cprint(message, color, attrs=['bold'], file=channel)

        return self


# Lets termcolor's ANSI sequences work on legacy Windows consoles. Does nothing elsewhere.
colorama.just_fix_windows_console()

console = Console()
