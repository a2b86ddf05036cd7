"""
CNF token-rule matching.

Rules are AND-of-OR expressions over literals; a literal is a token pattern
with optional wildcards and negation, or a reference to another rule. This
package evaluates a rule set against a tokenized text:

- match_ast: Tokens, pattern tokens, literals, rules and match ranges
- match_pattern: Wildcard search of one literal over a token sequence
- match_ruleset: Validated rule sets (duplicates, dangling/self/cyclic references)
- match_evaluator: CNF evaluation, sequential or on a thread pool
- match_tokenizer: Text tokenization with character spans
- match_loader: Rule sets from JSON documents
"""

from .match_ast import (
    AnyToken,
    Literal,
    MatchRange,
    MatchRule,
    OneOrMore,
    Token,
    Word,
    ZeroOrMore,
)
from .match_errors import (
    AdjacentWildcardError,
    CyclicReferenceError,
    DanglingReferenceError,
    DuplicateRuleError,
    InvalidLiteralError,
    MismatchedHeadError,
    MalformedPatternError,
    RuleLoadError,
    RuleSetError,
    SelfReferenceError,
    UnresolvedReferenceError,
)
from .match_evaluator import (
    EvaluationStats,
    RuleEvaluator,
    evaluate,
    evaluate_parallel,
    matches,
)
from .match_loader import load_rules, parse_rules
from .match_pattern import find_range
from .match_ruleset import MatchRuleSet
from .match_tokenizer import TokenizationFlags, Tokenizer, tokenize

__all__ = [
    "AnyToken",
    "Literal",
    "MatchRange",
    "MatchRule",
    "OneOrMore",
    "Token",
    "Word",
    "ZeroOrMore",
    "AdjacentWildcardError",
    "CyclicReferenceError",
    "DanglingReferenceError",
    "DuplicateRuleError",
    "InvalidLiteralError",
    "MismatchedHeadError",
    "MalformedPatternError",
    "RuleLoadError",
    "RuleSetError",
    "SelfReferenceError",
    "UnresolvedReferenceError",
    "EvaluationStats",
    "RuleEvaluator",
    "evaluate",
    "evaluate_parallel",
    "matches",
    "load_rules",
    "parse_rules",
    "find_range",
    "MatchRuleSet",
    "TokenizationFlags",
    "Tokenizer",
    "tokenize",
]
