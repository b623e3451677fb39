#!/usr/bin/env python3
"""Include/exclude pattern filtering of repository full names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Tuple

EXCLUDE_MARKER = "-"


class FilterPatternError(ValueError):
    """Raised when a filter pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"could not parse {pattern}: {reason}")
        self.pattern = pattern
        self.reason = reason


@dataclass(frozen=True)
class FilterSet:
    """Compiled include and exclude patterns.

    A name passes when it matches every include pattern (vacuously true when
    there are none) and none of the exclude patterns. Patterns are searched
    anywhere in the name; anchor them with ``^``/``$`` for exact matches.
    """
    include: Tuple[Pattern[str], ...] = ()
    exclude: Tuple[Pattern[str], ...] = ()

    def passes(self, full_name: str) -> bool:
        if not all(regex.search(full_name) for regex in self.include):
            return False
        return not any(regex.search(full_name) for regex in self.exclude)


def compile_filters(patterns: Iterable[str]) -> FilterSet:
    """Compile raw CLI patterns into a FilterSet.

    Patterns prefixed with a dash are routed to the exclude set with the dash
    removed. The first pattern that does not compile raises FilterPatternError.
    """
    include: List[Pattern[str]] = []
    exclude: List[Pattern[str]] = []

    for raw in patterns:
        negated = raw.startswith(EXCLUDE_MARKER)
        source = raw[len(EXCLUDE_MARKER):] if negated else raw
        try:
            regex = re.compile(source)
        except re.error as e:
            raise FilterPatternError(raw, str(e)) from e

        if negated:
            exclude.append(regex)
        else:
            include.append(regex)

    return FilterSet(include=tuple(include), exclude=tuple(exclude))
