"""
Mapping of conversion failures to messages and exit codes for the ``rbbf2xml`` command.

Library errors (`RBBFConverterError` and its subclasses) and `DescriptiveError` carry messages that say exactly what
is wrong with the input, so only the message is shown. Anything else reaching `pretty_unhandled` is a bug and is
printed with its trace.
"""

import sys
import traceback

from contextlib import contextmanager
from functools import wraps
from textwrap import dedent
from typing import NoReturn, Iterator, List

from ..errors import RBBFConverterError, UnknownBlockTagError, UnexpectedTopLevelTagError
from .console import console


EXIT_OK = 0
EXIT_FORMAT_ERROR = 2
EXIT_UNKNOWN_BLOCK_TAG = 3
EXIT_CRASH = -1


class DescriptiveError(RuntimeError):
    """
    A command-line level error (bad paths, unreadable files) whose message is all the user needs to see.
    """


def fail(message: str) -> NoReturn:
    raise DescriptiveError(dedent(message).strip())


@contextmanager
def descriptive_errors(*classes: type) -> Iterator[None]:
    """
    Re-raises errors of the given classes as `DescriptiveError`, keeping only their message.
    """
    try:
        yield
    except classes as e:
        raise DescriptiveError(str(e) or e.__class__.__name__) from None


def describe_error(error: BaseException) -> str:
    """
    Renders an error and the chain of errors that caused it, one per line. Causes are indented.
    """
    lines = []

    for index, cause in enumerate(_causal_chain(error)):
        if isinstance(cause, (DescriptiveError, RBBFConverterError)):
            text = str(cause) or cause.__class__.__name__
        else:
            text = ''.join(traceback.format_exception_only(cause.__class__, cause)).rstrip()

        lines.append(text if index == 0 else '  ' + text)

    return '\n'.join(lines)


def exit_status_for(error: RBBFConverterError) -> int:
    if isinstance(error, (UnknownBlockTagError, UnexpectedTopLevelTagError)):
        return EXIT_UNKNOWN_BLOCK_TAG

    return EXIT_FORMAT_ERROR


def _causal_chain(error: BaseException) -> List[BaseException]:
    result = [error]

    while error.__cause__ is not None:
        error = error.__cause__
        result.append(error)

    return result


def pretty_unhandled(main_method):
    """
    Decorator for the main function. Errors escaping it are printed and turned into exit status -1.

    `SystemExit` passes through. `KeyboardInterrupt` exits quietly with status 0.
    """

    @wraps(main_method)
    def wrapper(*args, **kwargs):
        try:
            return main_method(*args, **kwargs)
        except KeyboardInterrupt:
            console.print_warning("Stopped by user")
            sys.exit(EXIT_OK)
        except DescriptiveError as e:
            console.print_error(describe_error(e))
        except Exception as e:
            console.print_error(''.join(traceback.format_exception(e.__class__, e, e.__traceback__)).rstrip())

        sys.exit(EXIT_CRASH)

    return wrapper
