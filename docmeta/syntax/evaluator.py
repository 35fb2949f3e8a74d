"""Evaluate directive argument text into a ParameterList.

The argument text is treated as the body of an implicit parenthesised
group. Quoted literals are lifted out first so whitespace normalisation can
not touch their content, barewords become string literals (``true``/``false``
and numerals become booleans and numbers), ``( )`` opens a nested list and
``key: value`` associates a key with a value. The result is interpreted by a
small recursive-descent evaluator over that closed grammar; nothing is ever
handed to ``eval``.

Nested groups are limited to one level: ``!Column (a, b)`` is fine,
``!Column ((a))`` is a ParseError.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ParseError
from ..models import ParameterList, Scalar, Value

_LITERAL_PATTERN = re.compile(r"'(.*?)(?<!\\)'|\"(.*?)(?<!\\)\"")
_SEPARATOR_PATTERN = re.compile(r"\s*([(),:])\s*")
_SPLIT_PATTERN = re.compile(r"([(),:])")
_PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")
_INT_PATTERN = re.compile(r"[+-]?\d+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?\d+[eE][+-]?\d+")
_KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_.-]*")

_PUNCTUATION = frozenset("(),:")
_MAX_DEPTH = 1


@dataclass(frozen=True)
class _Token:
    kind: str  # "punct", "literal" or "word"
    text: str
    value: Optional[str] = None


Entry = Tuple[Optional[str], Value]


def evaluate_arguments(argument_text: str, *, name: Optional[str] = None) -> ParameterList:
    """Return the ParameterList described by ``argument_text``.

    Raises :class:`ParseError` when the text does not reduce to a literal list.
    """
    try:
        wrapped = f"({argument_text})"
        masked, literals = _extract_literals(wrapped)
        normalized = _SEPARATOR_PATTERN.sub(r"\1", masked)
        tokens = _tokenize(normalized, literals)
        entries = _GroupParser(tokens).parse()
    except _SyntaxProblem as exc:
        label = f"!{name} " if name else ""
        raise ParseError(
            f'There is an unparseable annotation value: "{label}{argument_text}" ({exc})',
            annotation=name,
        ) from None

    parameters = ParameterList()
    for key, value in entries:
        if key:
            parameters.set(key, value)
        else:
            parameters.add(value)
    return parameters


def render_directive(
    name: str,
    positional: Sequence[Value] = (),
    keyed: Optional[Mapping[str, Value]] = None,
) -> str:
    """Render a directive that evaluates back to the given parameters.

    Raises ValueError for anything that would not survive a scan and
    evaluate cycle unchanged.
    """
    parts = [_render_value(value) for value in positional]
    for key, value in (keyed or {}).items():
        if not _KEY_PATTERN.fullmatch(key):
            raise ValueError(f"Key {key!r} cannot be rendered as a bareword")
        if key != key.lower():
            raise ValueError(f"Key {key!r} must be lower-case; keys are folded when parsed")
        parts.append(f"{key}: {_render_value(value)}")
    if not parts:
        return f"!{name}"
    return f"!{name} " + ", ".join(parts)


class _SyntaxProblem(Exception):
    pass


def _extract_literals(text: str) -> Tuple[str, List[str]]:
    literals: List[str] = []

    def _stash(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            literals.append(match.group(1).replace("\\'", "'"))
        else:
            literals.append(match.group(2).replace('\\"', '"'))
        return f"\x00{len(literals) - 1}\x00"

    return _LITERAL_PATTERN.sub(_stash, text), literals


def _tokenize(text: str, literals: Sequence[str]) -> List[_Token]:
    tokens: List[_Token] = []
    for part in _SPLIT_PATTERN.split(text):
        if part in _PUNCTUATION:
            tokens.append(_Token("punct", part))
            continue
        stripped = part.strip()
        if not stripped:
            continue
        if "\x00" in stripped:
            placeholder = _PLACEHOLDER_PATTERN.fullmatch(stripped)
            if placeholder is None:
                raise _SyntaxProblem("quoted string run together with other text")
            tokens.append(_Token("literal", stripped, literals[int(placeholder.group(1))]))
            continue
        if "'" in stripped or '"' in stripped:
            raise _SyntaxProblem("unterminated quoted string")
        tokens.append(_Token("word", stripped, stripped))
    return tokens


class _GroupParser:
    """Recursive-descent evaluator over group / entry / scalar productions."""

    def __init__(self, tokens: Sequence[_Token]) -> None:
        self._tokens = list(tokens)
        self._index = 0

    def parse(self) -> List[Entry]:
        entries = self._group(depth=0)
        if self._index != len(self._tokens):
            raise _SyntaxProblem(f"unexpected {self._describe(self._peek())}")
        return entries

    def _group(self, depth: int) -> List[Entry]:
        self._expect("(")
        entries: List[Entry] = []
        if self._accept(")"):
            return entries
        while True:
            entries.append(self._entry(depth))
            if self._accept(")"):
                return entries
            self._expect(",")
            # Trailing separator before the closing parenthesis is allowed.
            if self._accept(")"):
                return entries

    def _entry(self, depth: int) -> Entry:
        token = self._peek()
        following = self._peek(1)
        if token is not None and token.kind != "punct" and _is_punct(following, ":"):
            if depth > 0:
                raise _SyntaxProblem("keyed values are only allowed at the top level")
            self._index += 2
            return (token.value or "").lower(), self._value(depth)
        return None, self._value(depth)

    def _value(self, depth: int) -> Value:
        token = self._peek()
        if token is None:
            raise _SyntaxProblem("unexpected end of arguments")
        if _is_punct(token, "("):
            if depth >= _MAX_DEPTH:
                raise _SyntaxProblem("lists may only be nested one level deep")
            entries = self._group(depth + 1)
            return [value for _, value in entries]
        if token.kind == "punct":
            raise _SyntaxProblem(f"unexpected {self._describe(token)}")
        self._index += 1
        if token.kind == "literal":
            return token.value or ""
        return _coerce_bareword(token.value or "")

    def _peek(self, ahead: int = 0) -> Optional[_Token]:
        position = self._index + ahead
        if position < len(self._tokens):
            return self._tokens[position]
        return None

    def _accept(self, punct: str) -> bool:
        if _is_punct(self._peek(), punct):
            self._index += 1
            return True
        return False

    def _expect(self, punct: str) -> None:
        if not self._accept(punct):
            raise _SyntaxProblem(f"expected '{punct}' but found {self._describe(self._peek())}")

    @staticmethod
    def _describe(token: Optional[_Token]) -> str:
        if token is None:
            return "end of arguments"
        if token.kind == "literal":
            return "a quoted string"
        return f"'{token.text}'"


def _is_punct(token: Optional[_Token], punct: str) -> bool:
    return token is not None and token.kind == "punct" and token.text == punct


def _coerce_bareword(word: str) -> Scalar:
    lowered = word.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_PATTERN.fullmatch(word):
        return int(word)
    if _FLOAT_PATTERN.fullmatch(word):
        return float(word)
    return word


def _render_value(value: Union[Value, Sequence[Scalar]]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Non-finite number {value!r} cannot be rendered")
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        if value.endswith("\\"):
            raise ValueError("Strings ending in a backslash cannot be quoted")
        if "\n" in value or "\r" in value or "*/" in value:
            raise ValueError("Strings with line breaks or a comment terminator end the directive early")
        escaped = value.replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, (list, tuple)):
        inner = []
        for item in value:
            if isinstance(item, (list, tuple)):
                raise ValueError("Lists may only be nested one level deep")
            inner.append(_render_value(item))
        return "(" + ", ".join(inner) + ")"
    raise TypeError(f"Unsupported parameter value: {value!r}")


__all__ = ["evaluate_arguments", "render_directive"]
