"""Compile search box queries into file-name predicates.

Query forms, first match wins:

- blank                 → everything matches
- ``/pattern/flags``    → regular expression (``i`` is implied when no
                          flags are given); an invalid pattern falls back
                          to a substring search for the whole query text
- contains ``*`` or ``?`` → glob matched against the *whole* name
- anything else         → case-insensitive substring
"""

from __future__ import annotations

import re
from typing import Callable

Predicate = Callable[[str], bool]

_REGEX_LITERAL = re.compile(r"^/(.+)/([a-z]*)$", re.DOTALL)

_FLAG_MAP: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": re.UNICODE,
    # g and y only affect iteration state in other dialects.
    "g": re.NOFLAG,
    "y": re.NOFLAG,
}


def _match_all(name: str) -> bool:
    return True


def _substring(query: str) -> Predicate:
    needle = query.casefold()
    return lambda name: needle in name.casefold()


def _regex_flags(flags: str) -> re.RegexFlag:
    if not flags:
        return re.IGNORECASE
    result = re.NOFLAG
    for letter in flags:
        if letter not in _FLAG_MAP:
            raise re.error(f"unknown flag {letter!r}")
        result |= _FLAG_MAP[letter]
    return result


def glob_to_regex(query: str) -> str:
    """Translate a ``*``/``?`` wildcard query into an anchored pattern."""
    parts = []
    for char in query:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return "^" + "".join(parts) + "$"


def compile_query(query: str) -> Predicate:
    """Return a predicate telling whether a display name matches *query*."""
    if not query.strip():
        return _match_all

    literal = _REGEX_LITERAL.match(query)
    if literal is not None:
        try:
            pattern = re.compile(literal.group(1), _regex_flags(literal.group(2)))
        except re.error:
            return _substring(query)
        return lambda name: pattern.search(name) is not None

    if "*" in query or "?" in query:
        try:
            pattern = re.compile(glob_to_regex(query), re.IGNORECASE | re.DOTALL)
        except re.error:
            return _substring(query)
        return lambda name: pattern.fullmatch(name) is not None

    return _substring(query)
