from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .match_errors import AdjacentWildcardError, InvalidLiteralError

# Reserved words translated to wildcard variants by Literal.from_words
SINGLE_WILDCARD = "?"
ONE_OR_MORE_WILDCARD = "+"
ZERO_OR_MORE_WILDCARD = "*"
REFERENCE_PREFIX = "#"
NEGATION_PREFIX = "-"

# === Input Tokens ===


@dataclass(frozen=True)
class Token:
    """A word of the input text with its character span [char_start, char_end)."""

    word: str
    # Spans do not take part in equality: tokens compare by word content
    char_start: int = field(default=0, compare=False)
    char_end: int = field(default=0, compare=False)


# === Pattern Tokens ===


class PatternToken:
    """Base class for the elements of a literal's pattern."""

    pass


@dataclass(frozen=True)
class Word(PatternToken):
    """Matches exactly one input token with the same word."""

    text: str

    def __str__(self) -> str:
        return self.text


class Wildcard(PatternToken):
    """Base class for the wildcard markers."""

    symbol = ""

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class AnyToken(Wildcard):
    """Matches exactly one input token, whatever its word (?)."""

    symbol = SINGLE_WILDCARD


@dataclass(frozen=True)
class OneOrMore(Wildcard):
    """Matches a run of at least one token up to the next word (+)."""

    symbol = ONE_OR_MORE_WILDCARD


@dataclass(frozen=True)
class ZeroOrMore(Wildcard):
    """Matches a possibly empty run of tokens up to the next word (*)."""

    symbol = ZERO_OR_MORE_WILDCARD


_WILDCARDS = {
    SINGLE_WILDCARD: AnyToken(),
    ONE_OR_MORE_WILDCARD: OneOrMore(),
    ZERO_OR_MORE_WILDCARD: ZeroOrMore(),
}


def pattern_token(word: str) -> PatternToken:
    """Translate a pattern word into its pattern token variant."""
    return _WILDCARDS.get(word) or Word(word)


# === Literals and Rules ===


@dataclass(frozen=True)
class Literal:
    """
    An atomic test of a CNF expression.

    Either a token pattern (words and wildcards) or, when ``reference`` is set,
    a lookup of another rule's outcome whose single Word names that rule.
    Literals compare and hash structurally so they can key memo caches.
    """

    tokens: tuple[PatternToken, ...]
    negated: bool = False
    reference: bool = False

    def __post_init__(self):
        if not isinstance(self.tokens, tuple):
            object.__setattr__(self, "tokens", tuple(self.tokens))
        if not self.tokens:
            raise InvalidLiteralError("A literal needs at least one pattern token.")
        for tok in self.tokens:
            if not isinstance(tok, PatternToken):
                raise InvalidLiteralError(
                    f"Pattern elements must be pattern tokens, got: {tok!r}"
                )
        if self.reference:
            if len(self.tokens) != 1 or not isinstance(self.tokens[0], Word):
                raise InvalidLiteralError(
                    f"A rule reference must name exactly one rule head, got: {self}"
                )
            return
        for prev, cur in zip(self.tokens, self.tokens[1:]):
            if isinstance(prev, Wildcard) and isinstance(cur, Wildcard):
                raise AdjacentWildcardError(
                    f"Pattern contains multiple wildcards next to each other: {self}"
                )

    @classmethod
    def from_words(cls, words: Iterable[str], negated: bool = False) -> "Literal":
        """Build a pattern literal, turning ?, + and * into wildcards."""
        return cls(tokens=tuple(pattern_token(w) for w in words), negated=negated)

    @classmethod
    def ref(cls, head: str, negated: bool = False) -> "Literal":
        """Build a literal that refers to the rule named ``head``."""
        return cls(tokens=(Word(head),), negated=negated, reference=True)

    @property
    def target(self) -> Optional[str]:
        """The referenced rule head, or None for pattern literals."""
        if not self.reference:
            return None
        return self.tokens[0].text

    def __str__(self) -> str:
        body = " ".join(str(t) for t in self.tokens)
        if self.reference:
            body = REFERENCE_PREFIX + body
        return NEGATION_PREFIX + body if self.negated else body


Disjunction = tuple[Literal, ...]


@dataclass(frozen=True)
class MatchRule:
    """A named rule; ``expression`` is an AND of ORs over literals."""

    head: str
    expression: tuple[Disjunction, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept nested lists and freeze them
        object.__setattr__(
            self, "expression", tuple(tuple(d) for d in self.expression)
        )

    def literals(self) -> Iterable[Literal]:
        for disjunction in self.expression:
            yield from disjunction

    def __str__(self) -> str:
        if not self.expression:
            return f"{self.head} = "
        clauses = (
            "(" + " | ".join(str(lit) for lit in disjunction) + ")"
            for disjunction in self.expression
        )
        return f"{self.head} = " + " & ".join(clauses)


# === Match Result Structures ===


@dataclass(frozen=True)
class MatchRange:
    """Where a satisfied rule matched, as token and character spans (end exclusive)."""

    label: str
    token_start: int
    token_end: int
    char_start: int
    char_end: int

    @classmethod
    def from_token_range(
        cls, label: str, tokens: Sequence[Token], start: int, end: int
    ) -> "MatchRange":
        """Convert a token range into a MatchRange using the tokens' character spans."""
        if not tokens:
            # Vacuous match over an empty input
            return cls(label, start, end, 0, 0)
        return cls(
            label=label,
            token_start=start,
            token_end=end,
            char_start=tokens[start].char_start,
            char_end=tokens[end - 1].char_end,
        )

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "token_start": self.token_start,
            "token_end": self.token_end,
            "char_start": self.char_start,
            "char_end": self.char_end,
        }
