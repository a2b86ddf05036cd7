"""
CNF Evaluator: evaluates match rules against a token sequence.

A rule's expression is an AND of ORs over literals. Each disjunction is
satisfied by its first true literal; the rule holds when every disjunction
does. Pattern literals are searched with the wildcard matcher, reference
literals take the outcome of the rule they name.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from .match_ast import Literal, MatchRange, MatchRule, Token
from .match_errors import (
    CyclicReferenceError,
    DanglingReferenceError,
    UnresolvedReferenceError,
)
from .match_pattern import TokenRange, contains, find_range
from .match_ruleset import MatchRuleSet

logger = logging.getLogger(__name__)

RuleMapping = Mapping[str, MatchRule]
ProgressCallback = Callable[[int, int], None]


@dataclass
class EvaluationStats:
    """Counters describing the work done by one or more evaluations."""

    rule_evaluations: int = 0
    pattern_searches: int = 0
    cache_hits: int = 0
    stored_hits: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def count(self, name: str):
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def as_dict(self) -> Dict[str, int]:
        return {
            "rule_evaluations": self.rule_evaluations,
            "pattern_searches": self.pattern_searches,
            "cache_hits": self.cache_hits,
            "stored_hits": self.stored_hits,
        }


class SharedResults:
    """
    Rule outcomes shared by concurrent workers.

    Every head gets one cell. The first worker to ask for a head computes it,
    any other worker blocks on the cell until the outcome is known.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cells: Dict[str, Future] = {}
        self._ranges: Dict[str, MatchRange] = {}

    def resolve(
        self, head: str, compute: Callable[[], Optional[TokenRange]]
    ) -> Optional[TokenRange]:
        with self._lock:
            cell = self._cells.get(head)
            owner = cell is None
            if owner:
                cell = Future()
                self._cells[head] = cell
        if not owner:
            return cell.result()
        try:
            span = compute()
        except Exception as e:
            cell.set_exception(e)
            raise
        cell.set_result(span)
        return span

    def store(self, match_range: MatchRange):
        with self._lock:
            self._ranges[match_range.label] = match_range

    def get(self, head: str) -> Optional[MatchRange]:
        with self._lock:
            return self._ranges.get(head)


class RuleEvaluator:
    """
    Evaluates the rules of a rule set over one token sequence.

    ``rule_set`` may be a validated MatchRuleSet or any mapping from head to
    rule; references are resolved through it. Each call owns its literal
    caches and result mapping, so one evaluator may be reused freely.
    """

    def __init__(
        self,
        rule_set: Optional[RuleMapping],
        tokens: Sequence[Token],
        stats: Optional[EvaluationStats] = None,
        shared: Optional[SharedResults] = None,
    ):
        self.rule_set = rule_set
        self.tokens = tuple(tokens)
        self.total = len(self.tokens)
        self.stats = stats if stats is not None else EvaluationStats()
        self._shared = shared

    def find_rule_range(
        self,
        rule: MatchRule,
        results: Optional[Mapping[str, MatchRange]] = None,
        path: Tuple[str, ...] = (),
    ) -> Optional[TokenRange]:
        """
        Apply a rule in CNF to the tokens.

        Args:
            rule: The rule to evaluate
            results: Outcomes of rules evaluated earlier in this pass
            path: Heads of the rules currently being evaluated

        Returns:
            The token range spanned by the satisfied clauses, or None
        """
        path = path or (rule.head,)
        self.stats.count("rule_evaluations")
        if not rule.expression:
            # No constraints, match entire text
            return (0, self.total)

        range_found: Optional[TokenRange] = None
        cache: Dict[Literal, Optional[TokenRange]] = {}

        for disjunction in rule.expression:
            disjunction_range = None
            for lit in disjunction:
                if lit in cache:
                    self.stats.count("cache_hits")
                    disjunction_range = cache[lit]
                else:
                    if lit.reference:
                        disjunction_range = self._resolve_reference(lit, results, path)
                    else:
                        self.stats.count("pattern_searches")
                        disjunction_range = find_range(self.tokens, lit)
                    cache[lit] = disjunction_range
                if disjunction_range is not None:
                    break

            if disjunction_range is None:
                logger.debug("Rule '%s' failed", rule.head)
                return None
            if range_found is None:
                range_found = disjunction_range
            else:
                # Later clauses only extend the end
                range_found = (range_found[0], disjunction_range[1])

        return range_found

    def _resolve_reference(
        self,
        lit: Literal,
        results: Optional[Mapping[str, MatchRange]],
        path: Tuple[str, ...],
    ) -> Optional[TokenRange]:
        head = lit.target
        if self.rule_set is None:
            raise UnresolvedReferenceError(
                f"Cannot resolve #{head} without a rule set."
            )
        if head not in self.rule_set:
            raise DanglingReferenceError(
                f"Lookup to a rule that is not defined: #{head}."
            )
        if head in path:
            raise CyclicReferenceError(path[path.index(head) :] + (head,))

        if self._shared is not None:
            span = self._shared.resolve(
                head, lambda: self._evaluate_shared(head, path + (head,))
            )
        else:
            stored = results.get(head) if results is not None else None
            if stored is not None:
                self.stats.count("stored_hits")
                span = (stored.token_start, stored.token_end)
            else:
                span = self.find_rule_range(self.rule_set[head], results, path + (head,))

        if lit.negated:
            return None if span is not None else (0, self.total)
        return span

    def _evaluate_shared(self, head: str, path: Tuple[str, ...]) -> Optional[TokenRange]:
        span = self.find_rule_range(self.rule_set[head], None, path)
        if span is not None:
            self._shared.store(self.to_match_range(head, span))
        logger.debug("Rule '%s' evaluated on %s: %s", head, threading.current_thread().name, span)
        return span

    def to_match_range(self, head: str, span: TokenRange) -> MatchRange:
        return MatchRange.from_token_range(head, self.tokens, span[0], span[1])

    def evaluate(
        self, progress_callback: Optional[ProgressCallback] = None
    ) -> Dict[str, MatchRange]:
        """Evaluate every rule one after the other, in rule set order."""
        results: Dict[str, MatchRange] = {}
        rules = list(self.rule_set.values())
        total = len(rules)
        for idx, rule in enumerate(rules):
            if progress_callback:
                progress_callback(idx, total)
            span = self.find_rule_range(rule, results)
            if span is not None:
                results[rule.head] = self.to_match_range(rule.head, span)
        if progress_callback:
            progress_callback(total, total)
        logger.debug("Sequential evaluation matched %d of %d rules", len(results), total)
        return results

    def evaluate_parallel(
        self,
        max_workers: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Dict[str, MatchRange]:
        """
        Evaluate the rules concurrently on a thread pool.

        Each rule is computed at most once; a worker that needs a rule another
        worker is computing waits for that outcome. Rules are submitted
        dependencies first. The result mapping follows rule set order.
        """
        rule_set = self.rule_set
        if not isinstance(rule_set, MatchRuleSet):
            # Waiting on cells is only safe for an acyclic rule set
            rule_set = MatchRuleSet(rule_set)
        shared = SharedResults()
        worker = RuleEvaluator(rule_set, self.tokens, self.stats, shared)

        order = rule_set.evaluation_order()
        total = len(order)
        logger.debug("Evaluating %d rules with max_workers=%s", total, max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(
                    shared.resolve, head, lambda h=head: worker._evaluate_shared(h, (h,))
                )
                for head in order
            ]
            for idx, future in enumerate(futures):
                if progress_callback:
                    progress_callback(idx, total)
                # Re-raises errors from the workers
                future.result()
        if progress_callback:
            progress_callback(total, total)

        results: Dict[str, MatchRange] = {}
        for head in rule_set:
            match_range = shared.get(head)
            if match_range is not None:
                results[head] = match_range
        return results


def evaluate(
    rule_set: RuleMapping,
    tokens: Sequence[Token],
    stats: Optional[EvaluationStats] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Dict[str, MatchRange]:
    """Return the MatchRange of every matching rule, evaluated sequentially."""
    return RuleEvaluator(rule_set, tokens, stats).evaluate(progress_callback)


def evaluate_parallel(
    rule_set: RuleMapping,
    tokens: Sequence[Token],
    max_workers: Optional[int] = None,
    stats: Optional[EvaluationStats] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> Dict[str, MatchRange]:
    """Return the MatchRange of every matching rule, evaluated on a thread pool."""
    return RuleEvaluator(rule_set, tokens, stats).evaluate_parallel(
        max_workers, progress_callback
    )


def matches(
    tokens: Sequence[Token],
    literal_or_rule: Union[Literal, MatchRule],
    rule_set: Optional[RuleMapping] = None,
) -> bool:
    """Whether a literal or a rule holds on ``tokens``, without building a MatchRange."""
    if isinstance(literal_or_rule, Literal) and not literal_or_rule.reference:
        return contains(tokens, literal_or_rule)
    evaluator = RuleEvaluator(rule_set, tokens)
    if isinstance(literal_or_rule, Literal):
        return evaluator._resolve_reference(literal_or_rule, None, ()) is not None
    return evaluator.find_rule_range(literal_or_rule) is not None
