"""
A validated collection of match rules.

A MatchRuleSet maps rule heads to rules and guarantees, once constructed,
that every reference literal names another rule of the set and that the
references form no cycle.
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from .match_ast import MatchRule
from .match_errors import (
    CyclicReferenceError,
    DanglingReferenceError,
    DuplicateRuleError,
    MismatchedHeadError,
    SelfReferenceError,
)

logger = logging.getLogger(__name__)


class MatchRuleSet(Mapping):
    """
    Rules that define the labels that may be triggered on a text.

    Accepts either a sequence of rules, where a repeated head is an error, or
    a mapping from head to rule. Construction validates all references and
    fails atomically.
    """

    def __init__(self, rules: Union[Iterable[MatchRule], Mapping[str, MatchRule]] = ()):
        collected: Dict[str, MatchRule] = {}
        if isinstance(rules, Mapping):
            for head, rule in rules.items():
                if head != rule.head:
                    raise MismatchedHeadError(
                        f"Rule '{rule.head}' is registered under a different head '{head}'."
                    )
                collected[head] = rule
        else:
            for rule in rules:
                if rule.head in collected:
                    raise DuplicateRuleError(
                        f"There are multiple definitions of rule '{rule.head}'."
                    )
                collected[rule.head] = rule

        self._rules = collected
        self._references = self._check_lookups()
        self._order = self._check_cycles()
        logger.debug("Validated rule set with %d rules", len(self._rules))

    def _check_lookups(self) -> Dict[str, Tuple[str, ...]]:
        """Check reference targets and collect each rule's direct dependencies."""
        references = {}
        for rule in self._rules.values():
            targets = []
            for lit in rule.literals():
                if not lit.reference:
                    continue
                lookup = lit.target
                if lookup not in self._rules:
                    raise DanglingReferenceError(
                        f"Rule '{rule.head}' contains a lookup to a rule that is not defined: #{lookup}."
                    )
                if lookup == rule.head:
                    raise SelfReferenceError(
                        f"Rule '{lookup}' contains a lookup to itself. No recursion allowed."
                    )
                if lookup not in targets:
                    targets.append(lookup)
            references[rule.head] = tuple(targets)
        return references

    def _check_cycles(self) -> Tuple[str, ...]:
        """
        Depth-first walk of the reference graph.

        Returns the heads ordered so that every rule comes after the rules it
        references; raises CyclicReferenceError on the first cycle found.
        """
        order: List[str] = []
        done = set()
        for root in self._rules:
            if root in done:
                continue
            path = [root]
            on_path = {root}
            stack = [iter(self._references[root])]
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    head = path.pop()
                    on_path.discard(head)
                    done.add(head)
                    order.append(head)
                elif child in on_path:
                    cycle = path[path.index(child) :] + [child]
                    raise CyclicReferenceError(cycle)
                elif child not in done:
                    path.append(child)
                    on_path.add(child)
                    stack.append(iter(self._references[child]))
        return tuple(order)

    def references(self, head: str) -> Tuple[str, ...]:
        """Heads referenced directly by the rule ``head``."""
        return self._references[head]

    def evaluation_order(self) -> Tuple[str, ...]:
        """Heads ordered dependencies first."""
        return self._order

    def __getitem__(self, head: str) -> MatchRule:
        return self._rules[head]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __str__(self) -> str:
        return "\n".join(str(rule) for rule in self._rules.values())
