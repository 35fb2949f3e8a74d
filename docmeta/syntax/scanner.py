"""Extract ``!Name argument-text`` directives from doc comment blocks."""

from __future__ import annotations

import re
from typing import List

from ..models import RawInvocation

# Arguments run to the end of the line or to a closing ``*/``, whichever
# comes first.
_DIRECTIVE_PATTERN = re.compile(
    r"!(?P<name>[A-Za-z_][A-Za-z0-9_]*)[^\S\r\n]*(?P<args>.*?)(?=\*/|[\r\n]|$)",
    re.MULTILINE,
)


def scan_directives(comment: str) -> List[RawInvocation]:
    """Return every directive in ``comment`` in source order.

    A ``!`` that is not followed by an identifier is not a directive and is
    skipped silently.
    """
    if not comment or "!" not in comment:
        return []
    invocations: List[RawInvocation] = []
    for match in _DIRECTIVE_PATTERN.finditer(comment):
        invocations.append(
            RawInvocation(
                name=match.group("name"),
                argument_text=match.group("args").rstrip(),
                offset=match.start(),
            )
        )
    return invocations


def line_of(text: str, index: int) -> int:
    """Return the 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


__all__ = ["line_of", "scan_directives"]
