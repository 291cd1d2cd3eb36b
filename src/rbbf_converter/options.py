from dataclasses import dataclass
from enum import Enum

from .version import FALLBACK_VERSION


class TrailerPolicy(Enum):
    """
    What to do when a group's closing trailer does not echo the group's opening ID (or its type is not ``'Int '``).
    """
    IGNORE = 'ignore'
    """Do nothing. This matches the historic behavior of tolerating slightly malformed files silently."""
    WARN = 'warn'
    """Log a warning and record the mismatch in the conversion result, but keep the decoded content."""
    FAIL = 'fail'
    """Treat the mismatch as a block decode error."""


@dataclass(frozen=True)
class ConvertOptions:
    trailer_policy: TrailerPolicy = TrailerPolicy.WARN
    fail_fast: bool = False
    """If True, errors inside a block abort the whole conversion instead of just the block."""
    fallback_version: str = FALLBACK_VERSION
    """The project version to use if the Project block does not specify one."""
