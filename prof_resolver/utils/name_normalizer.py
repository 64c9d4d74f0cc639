"""Query-name cleanup: honorific stripping and given/family name splitting."""

import re
from typing import NamedTuple


HONORIFIC_PATTERN = re.compile(r"^(?:Prof\.|Dr\.|Mr\.|Ms\.|Mrs\.)\s+", re.IGNORECASE)


class ParsedName(NamedTuple):
    """A cleaned query name split into tokens.

    given is the first token and family the last; middle tokens are kept in
    tokens but never move the surname boundary. Both are "" for an empty name.
    """

    tokens: tuple[str, ...]
    given: str
    family: str

    @property
    def has_given_name(self) -> bool:
        return len(self.tokens) > 1


def clean_name(raw_name: str) -> str:
    """Strip one leading honorific and surrounding whitespace.

    Example:
        >>> clean_name("Dr. Stuart Reges")
        'Stuart Reges'
    """
    if not raw_name:
        return ""
    return HONORIFIC_PATTERN.sub("", raw_name.strip()).strip()


def split_name(name: str) -> ParsedName:
    """Clean a query name and split it into given/family tokens."""
    tokens = tuple(clean_name(name).split())
    if not tokens:
        return ParsedName(tokens=(), given="", family="")
    return ParsedName(tokens=tokens, given=tokens[0], family=tokens[-1])
