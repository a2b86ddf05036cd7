"""
Text tokenization for the CNF matcher.

Splits text into words and punctuation with a lark lexer and keeps, for
every token, its character span in the original text so that matches can be
mapped back onto it.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from lark import Lark

from .match_ast import Token

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).parent / "match_tokens.lark"
with open(GRAMMAR_PATH, "r", encoding="utf-8") as f:
    TOKEN_GRAMMAR = f.read()

token_lexer = Lark(TOKEN_GRAMMAR, start="start", parser="lalr", lexer="basic")


class TokenizationFlags:
    """Flags that control how text is tokenized and normalized."""

    def __init__(self, ignore_case: bool = False, ignore_punctuation: bool = False):
        self.ignore_case = ignore_case
        self.ignore_punctuation = ignore_punctuation


class Tokenizer:
    """
    Turns text into an immutable sequence of Tokens.

    Words are lowercased when ``ignore_case`` is set; character spans always
    refer to the original text. Results are cached per text.
    """

    def __init__(self, flags: Optional[TokenizationFlags] = None):
        self.flags = flags or TokenizationFlags()
        self._cache: Dict[str, Tuple[Token, ...]] = {}

    def tokenize(self, text: str) -> Tuple[Token, ...]:
        """
        Tokenize text.

        Args:
            text: Input text to tokenize

        Returns:
            Tuple of tokens in text order
        """
        if not text:
            return ()
        if text in self._cache:
            return self._cache[text]

        tokens = []
        for lexed in token_lexer.lex(text):
            if self.flags.ignore_punctuation and lexed.type == "PUNCT":
                continue
            word = str(lexed)
            if self.flags.ignore_case:
                word = word.lower()
            tokens.append(Token(word, lexed.start_pos, lexed.end_pos))

        result = tuple(tokens)
        self._cache[text] = result
        logger.debug("Tokenized %d characters into %d tokens", len(text), len(result))
        return result


def tokenize(text: str, flags: Optional[TokenizationFlags] = None) -> Tuple[Token, ...]:
    """Tokenize text with a one-off Tokenizer."""
    return Tokenizer(flags).tokenize(text)
