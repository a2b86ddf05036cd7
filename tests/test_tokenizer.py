import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cnfmatch.match_ast import Literal, MatchRule
from cnfmatch.match_evaluator import evaluate
from cnfmatch.match_ruleset import MatchRuleSet
from cnfmatch.match_tokenizer import TokenizationFlags, Tokenizer, tokenize


def spans(tokens):
    return [(t.word, t.char_start, t.char_end) for t in tokens]


def test_words_and_punctuation():
    assert spans(tokenize("The cat sat.")) == [
        ("The", 0, 3),
        ("cat", 4, 7),
        ("sat", 8, 11),
        (".", 11, 12),
    ]


def test_spans_index_original_text():
    text = "  Hello,\n\tworld!  "
    tokens = tokenize(text)
    assert [text[t.char_start : t.char_end] for t in tokens] == [
        "Hello",
        ",",
        "world",
        "!",
    ]


def test_apostrophes_stay_in_words():
    assert [t.word for t in tokenize("don't stop l'homme")] == ["don't", "stop", "l'homme"]


def test_numbers_and_unicode():
    assert spans(tokenize("café 42 naïve")) == [
        ("café", 0, 4),
        ("42", 5, 7),
        ("naïve", 8, 13),
    ]


def test_ignore_case_keeps_spans():
    tokens = Tokenizer(TokenizationFlags(ignore_case=True)).tokenize("The CAT")
    assert spans(tokens) == [("the", 0, 3), ("cat", 4, 7)]


def test_ignore_punctuation():
    tokens = tokenize("Yes, no; maybe.", TokenizationFlags(ignore_punctuation=True))
    assert [t.word for t in tokens] == ["Yes", "no", "maybe"]


def test_empty_text():
    assert tokenize("") == ()
    assert tokenize("   \n ") == ()


def test_tokenizer_caches_results():
    tokenizer = Tokenizer()
    assert tokenizer.tokenize("a b") is tokenizer.tokenize("a b")


def test_tokenized_text_feeds_evaluation():
    text = "The cat sat on the mat."
    tokens = tokenize(text)
    rule_set = MatchRuleSet(
        [MatchRule("R", ((Literal.from_words(["cat", "*", "mat"]),),))]
    )
    result = evaluate(rule_set, tokens)["R"]
    assert text[result.char_start : result.char_end] == "cat sat on the mat"
