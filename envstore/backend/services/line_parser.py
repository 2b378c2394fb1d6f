"""Tokenize raw ``KEY=VALUE`` lines.

Stateless helpers used by the loader. Lines are trimmed, classified as blank,
comment or pair, and split at the first ``=`` only.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass, field

from envstore.backend.services.errors import ParseError

WHITESPACE = " \t\r\n"
COMMENT_PREFIX = "#"
SEPARATOR = "="


@dataclass
class ParseResult:
    """Outcome of scanning a sequence of lines.

    Attributes:
        entries: Parsed pairs; later lines overwrite earlier ones.
        malformed: 1-based numbers of non-blank, non-comment lines without ``=``.
    """

    entries: MutableMapping[str, str] = field(default_factory=dict)
    malformed: list[int] = field(default_factory=list)


def trim_line(raw: str) -> str:
    """Strip spaces, tabs, carriage returns and newlines from both ends.

    Args:
        raw: Line as read from the file, possibly with its terminator.

    Returns:
        The trimmed line. Empty and all-whitespace input give ``""``.
    """
    return raw.strip(WHITESPACE)


def is_skippable(line: str) -> bool:
    """Return True for trimmed lines that are blank or comments."""
    return not line or line.startswith(COMMENT_PREFIX)


def parse_line(raw: str) -> tuple[str, str] | None:
    """Parse a single raw line.

    Only the whole line is trimmed: the key keeps any spaces before ``=`` and
    the value keeps everything after it, including further ``=`` characters.

    Args:
        raw: Line as read from the file.

    Returns:
        ``(key, value)`` or None when the line is blank, a comment or has
        no ``=``.
    """
    line = trim_line(raw)
    if is_skippable(line):
        return None
    return split_pair(line)


def split_pair(line: str) -> tuple[str, str] | None:
    """Split an already trimmed line at its first ``=``, None if there is none."""
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        return None
    return key, value


def parse_lines(
    lines: Iterable[str],
    *,
    strict: bool = False,
    into: MutableMapping[str, str] | None = None,
) -> ParseResult:
    """Parse lines in order with last-write-wins semantics.

    Args:
        lines: Raw lines in file order.
        strict: Raise instead of silently skipping malformed lines.
        into: Mapping that receives entries as they are parsed. Entries
            already written stay there if reading ``lines`` fails midway.

    Returns:
        The collected entries and malformed line numbers.

    Raises:
        ParseError: In strict mode, once the whole input has been scanned and
            at least one malformed line was seen.
    """
    result = ParseResult() if into is None else ParseResult(entries=into)
    for number, raw in enumerate(lines, start=1):
        line = trim_line(raw)
        if is_skippable(line):
            continue
        pair = split_pair(line)
        if pair is None:
            result.malformed.append(number)
            continue
        key, value = pair
        result.entries[key] = value

    if strict and result.malformed:
        raise ParseError(result.malformed)
    return result
