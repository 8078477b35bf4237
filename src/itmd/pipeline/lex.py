"""Header-line lexer.

Scans a header line and reports the grammar separators it contains:

- ``::`` with a space on both sides;
- a route dash, `` - `` (the reported index is the dash itself);
- the words ``at``, ``from``, ``to`` and ``via``, each preceded by the
  start of the line or a space and followed by a space or the end of
  the line.

Separators inside ``[...]``, ``(...)`` or backtick code spans are
ignored, so link labels and URLs written in raw markdown never split a
header.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from itmd.services import Services, identity_shadow

SeparatorKind = Literal["doublecolon", "at", "routeDash", "from", "to", "via"]

# Word separators in match order, as (kind, literal).
_WORDS: tuple[tuple[SeparatorKind, str], ...] = (
    ("at", "at"),
    ("from", "from"),
    ("to", "to"),
    ("via", "via"),
)


@dataclass(frozen=True)
class Separator:
    """A grammar separator found by :func:`lex_line`.

    Attributes:
        kind: Separator kind.
        index: Offset of the separator's first character in the shadow
            text.
    """

    kind: SeparatorKind
    index: int

    @property
    def length(self) -> int:
        if self.kind == "doublecolon":
            return 2
        if self.kind == "routeDash":
            return 1
        return len(self.kind)


@dataclass(frozen=True)
class LexTokens:
    """Lexer output for one header line.

    Attributes:
        raw: The line as given.
        shadow: The scanned text (identical to ``raw`` by default).
        seps: Separators in line order.
        index_map: Maps a shadow offset back to the raw line.
    """

    raw: str
    shadow: str
    seps: list[Separator] = field(default_factory=list)
    index_map: Callable[[int], int] = field(default=lambda idx: idx)

    def of_kind(self, *kinds: SeparatorKind) -> list[Separator]:
        return [sep for sep in self.seps if sep.kind in kinds]


def _word_at(text: str, idx: int, word: str) -> bool:
    if not text.startswith(word, idx):
        return False
    if idx > 0 and text[idx - 1] != " ":
        return False
    after = idx + len(word)
    return after == len(text) or text[after] == " "


def lex_line(line: str, services: Services | None = None) -> LexTokens:
    """Tokenize one header line into separators.

    Args:
        line: The header line (or the flattened header paragraph).
        services: Supplies the shadow hook; the identity shadow is used
            when omitted.

    Returns:
        A :class:`LexTokens` whose separator offsets index the shadow
        text.
    """
    make_shadow = services.make_shadow if services is not None else identity_shadow
    shadow = make_shadow(line)
    text = shadow.text

    seps: list[Separator] = []
    in_code = False
    bracket_depth = 0
    paren_depth = 0

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "`":
            in_code = not in_code
            i += 1
            continue
        if in_code:
            i += 1
            continue
        if ch == "[":
            bracket_depth += 1
        elif ch == "]":
            bracket_depth = max(0, bracket_depth - 1)
        elif ch == "(":
            paren_depth += 1
        elif ch == ")":
            paren_depth = max(0, paren_depth - 1)
        elif bracket_depth == 0 and paren_depth == 0:
            matched = _match_separator(text, i)
            if matched is not None:
                sep, advance = matched
                seps.append(sep)
                i += advance
                continue
        i += 1

    return LexTokens(raw=line, shadow=text, seps=seps, index_map=shadow.index_map)


def _match_separator(text: str, i: int) -> tuple[Separator, int] | None:
    """Match a separator starting at *i*; return it and the scan advance."""
    ch = text[i]
    if ch == ":":
        if text.startswith("::", i) and i > 0 and text[i - 1] == " " and text[i + 2 : i + 3] == " ":
            return Separator("doublecolon", i), 2
        return None
    if ch == " ":
        if text[i + 1 : i + 3] == "- ":
            # Advance to the trailing space so it can open a following
            # word separator (" - to ...").
            return Separator("routeDash", i + 1), 2
        return None
    for kind, word in _WORDS:
        if _word_at(text, i, word):
            return Separator(kind, i), len(word)
    return None
