import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from cnfmatch.match_ast import (
    AnyToken,
    Literal,
    OneOrMore,
    Token,
    Word,
    ZeroOrMore,
)
from cnfmatch.match_errors import (
    AdjacentWildcardError,
    InvalidLiteralError,
    MalformedPatternError,
)
from cnfmatch.match_pattern import contains, find_range


def make_tokens(text):
    """Whitespace-split tokens with character spans."""
    tokens = []
    offset = 0
    for word in text.split(" "):
        tokens.append(Token(word, offset, offset + len(word)))
        offset += len(word) + 1
    return tuple(tokens)


#         0   1   2   3  4   5
SENTENCE = "The cat sat on the mat"


def lit(*words, negated=False):
    return Literal.from_words(words, negated=negated)


def test_single_word():
    assert find_range(make_tokens("The cat sat"), lit("cat")) == (1, 2)


def test_zero_or_more_wildcard_expands_window():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("cat", "*", "mat")) == (1, 6)


def test_leftmost_window_wins():
    tokens = make_tokens("a b a b")
    assert find_range(tokens, lit("a", "b")) == (0, 2)
    assert find_range(tokens, lit("b", "a")) == (1, 3)


def test_words_compare_exactly():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("the")) == (4, 5)
    assert find_range(tokens, lit("THE")) is None


def test_single_wildcard_takes_one_token():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("cat", "?", "on")) == (1, 4)
    assert find_range(tokens, lit("cat", "?", "the")) is None


def test_single_wildcard_keeps_match_outcome():
    tokens = make_tokens(SENTENCE)
    fixed = find_range(tokens, lit("cat", "sat", "on"))
    wild = find_range(tokens, lit("cat", "?", "on"))
    assert fixed is not None and wild is not None
    assert fixed == wild


def test_one_or_more_needs_a_token_before_anchor():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("cat", "+", "on")) == (1, 4)
    assert find_range(tokens, lit("cat", "+", "sat")) is None
    assert find_range(tokens, lit("cat", "*", "sat")) == (1, 3)


def test_leading_wildcard_spans_from_window_start():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("*", "mat")) == (0, 6)
    assert find_range(tokens, lit("+", "The")) is None


def test_anchor_missing_fails():
    tokens = make_tokens(SENTENCE)
    assert find_range(tokens, lit("cat", "*", "dog")) is None


def test_trailing_wildcards():
    tokens = make_tokens("a b")
    assert find_range(tokens, lit("a", "+")) == (0, 2)
    assert find_range(tokens, lit("b", "+")) is None
    assert find_range(tokens, lit("b", "*")) == (1, 2)
    assert find_range(tokens, lit("*")) == (0, 1)


def test_pattern_longer_than_text():
    tokens = make_tokens(SENTENCE)
    pattern = SENTENCE.split(" ") + ["again"]
    assert find_range(tokens, lit(*pattern)) is None
    assert find_range(tokens, lit(*pattern, negated=True)) == (0, 6)


def test_negated_literal():
    tokens = make_tokens("A B")
    assert find_range(tokens, lit("C", negated=True)) == (0, 2)
    assert find_range(tokens, lit("B", negated=True)) is None


@pytest.mark.parametrize(
    "words",
    [("cat",), ("dog",), ("cat", "*", "mat"), ("cat", "+", "sat"), ("?", "on"), ("mat", "?")],
)
def test_negation_inverts_outcome(words):
    tokens = make_tokens(SENTENCE)
    assert contains(tokens, lit(*words)) != contains(tokens, lit(*words, negated=True))


def test_empty_input():
    assert find_range((), lit("cat")) is None
    assert find_range((), lit("cat", negated=True)) == (0, 0)


def test_adjacent_wildcards_rejected_at_construction():
    with pytest.raises(AdjacentWildcardError):
        lit("a", "*", "?")
    with pytest.raises(AdjacentWildcardError):
        Literal(tokens=(OneOrMore(), ZeroOrMore()))


def test_adjacent_wildcards_fail_at_match_time():
    pattern = lit("a")
    # Bypass construction checks
    object.__setattr__(pattern, "tokens", (Word("a"), ZeroOrMore(), OneOrMore(), Word("b")))
    with pytest.raises(MalformedPatternError):
        find_range(make_tokens("a x b"), pattern)


def test_invalid_literals():
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=())
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=(Word("a"), Word("b")), reference=True)
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=(AnyToken(),), reference=True)
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=("dog",))
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=["*", "?"])
    with pytest.raises(InvalidLiteralError):
        Literal(tokens=(Word("a"), "b"), negated=True)


def test_wildcard_words_become_variants():
    pattern = lit("a", "?", "b", "+", "c", "*", "d")
    assert pattern.tokens == (
        Word("a"),
        AnyToken(),
        Word("b"),
        OneOrMore(),
        Word("c"),
        ZeroOrMore(),
        Word("d"),
    )
    assert str(pattern) == "a ? b + c * d"


def test_literal_structural_equality():
    built = Literal(tokens=[Word("a"), ZeroOrMore(), Word("b")])
    assert built == lit("a", "*", "b")
    assert hash(built) == hash(lit("a", "*", "b"))
    assert built != lit("a", "*", "b", negated=True)
    assert Literal.ref("a") != lit("a")
    assert len({built, lit("a", "*", "b"), Literal.ref("a")}) == 2


def test_tokens_compare_by_word():
    assert Token("cat", 0, 3) == Token("cat", 10, 13)
    assert hash(Token("cat", 0, 3)) == hash(Token("cat", 10, 13))
    assert Token("cat", 0, 3) != Token("Cat", 0, 3)
