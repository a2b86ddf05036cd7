"""
Loading of rule sets from JSON documents.

A document lists rules as plain structures; nothing is parsed beyond JSON:

    {"version": "1.0",
     "rules": [{"head": "pet", "expression": [[{"tokens": ["cat"]}, {"ref": "dog"}]]},
               {"head": "dog", "expression": [[{"tokens": ["dog"], "negated": false}]]}]}

A literal has either ``tokens`` (words, with ?, + and * as wildcards) or
``ref`` (the head of another rule), and an optional ``negated`` flag.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from .match_ast import Literal, MatchRule
from .match_errors import RuleLoadError
from .match_ruleset import MatchRuleSet

# Version of the JSON rule document layout
RULES_FORMAT_VERSION = "1.0"


def literal_from_dict(data: Dict[str, Any]) -> Literal:
    negated = data.get("negated", False)
    if not isinstance(negated, bool):
        raise RuleLoadError(f"The negated flag must be true or false, got: {negated!r}")
    if "ref" in data:
        return Literal.ref(str(data["ref"]), negated=negated)
    words = data["tokens"]
    if isinstance(words, str):
        words = words.split()
    return Literal.from_words([str(w) for w in words], negated=negated)


def rule_from_dict(data: Dict[str, Any]) -> MatchRule:
    expression = tuple(
        tuple(literal_from_dict(lit) for lit in disjunction)
        for disjunction in data.get("expression", ())
    )
    return MatchRule(head=str(data["head"]), expression=expression)


def rules_from_dict(document: Dict[str, Any]) -> MatchRuleSet:
    """Build a validated rule set from a decoded rule document."""
    version = str(document.get("version", RULES_FORMAT_VERSION))
    if version != RULES_FORMAT_VERSION:
        raise RuleLoadError(
            f"Unsupported rule document version: {version}. Expected {RULES_FORMAT_VERSION}."
        )
    try:
        rules = [rule_from_dict(r) for r in document["rules"]]
    except (KeyError, TypeError, AttributeError) as e:
        raise RuleLoadError(f"Malformed rule document: {e!r}") from e
    return MatchRuleSet(rules)


def parse_rules(code: str) -> MatchRuleSet:
    try:
        document = json.loads(code)
    except json.JSONDecodeError as e:
        raise RuleLoadError(f"Rule document is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise RuleLoadError("A rule document must be a JSON object.")
    return rules_from_dict(document)


def load_rules(path: Union[str, Path]) -> MatchRuleSet:
    with open(path, "r", encoding="utf-8") as file:
        return parse_rules(file.read())

