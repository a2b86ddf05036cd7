"""
Wildcard-aware pattern search over a token sequence.

A pattern literal is matched by sliding a start index over the input and
walking the pattern left to right. Words must match exactly, ``?`` takes any
single token and ``+``/``*`` take a run of tokens up to the next word of the
pattern (the anchor). The first window that matches wins.
"""

from typing import Optional, Sequence, Tuple

from .match_ast import AnyToken, Literal, OneOrMore, PatternToken, Token, Wildcard, Word
from .match_errors import MalformedPatternError

TokenRange = Tuple[int, int]

# Window outcomes besides a match end
NO_MATCH = -1
EXHAUSTED = -2  # input ended before the pattern; later windows cannot fit either


def _match_window(
    tokens: Sequence[Token], pattern: Sequence[PatternToken], si: int
) -> int:
    """
    Try to match ``pattern`` starting at token ``si``.

    Returns the exclusive end of the matched window, NO_MATCH or EXHAUSTED.
    """
    total = len(tokens)
    pattern_len = len(pattern)
    pos = si
    pi = 0
    while pi < pattern_len:
        p = pattern[pi]
        if isinstance(p, Wildcard) and not isinstance(p, AnyToken):
            if pi + 1 == pattern_len:
                # Trailing run takes one token if any remain
                if pos < total:
                    return pos + 1
                return EXHAUSTED if isinstance(p, OneOrMore) else pos
            anchor = pattern[pi + 1]
            if not isinstance(anchor, Word):
                raise MalformedPatternError(
                    "Pattern contains multiple wildcards next to each other: "
                    + " ".join(str(t) for t in pattern)
                )
            first = pos + 1 if isinstance(p, OneOrMore) else pos
            if first >= total:
                return EXHAUSTED
            for k in range(first, total):
                if tokens[k].word == anchor.text:
                    break
            else:
                return NO_MATCH
            pos = k + 1
            pi += 2
            continue

        if pos >= total:
            return EXHAUSTED
        if isinstance(p, Word) and tokens[pos].word != p.text:
            return NO_MATCH
        pos += 1
        pi += 1
    return pos


def find_range(tokens: Sequence[Token], literal: Literal) -> Optional[TokenRange]:
    """
    Find the leftmost window of ``tokens`` matching a pattern literal.

    Returns the half-open token range ``(start, end)`` or None. A negated
    literal is true over the whole input exactly when the plain pattern is
    found nowhere.
    """
    total = len(tokens)
    found: Optional[TokenRange] = None
    for si in range(total):
        end = _match_window(tokens, literal.tokens, si)
        if end == EXHAUSTED:
            break
        if end != NO_MATCH:
            found = (si, end)
            break

    if literal.negated:
        return None if found else (0, total)
    return found


def contains(tokens: Sequence[Token], literal: Literal) -> bool:
    """Whether the pattern literal holds anywhere in ``tokens``."""
    return find_range(tokens, literal) is not None
