"""
Exception hierarchy for the CNF matcher.

Construction errors are raised while literals and rule sets are built; the
match-time errors surface only for structures that bypassed validation.
"""


class RuleSetError(ValueError):
    """Base class for invalid rule structures."""


class DuplicateRuleError(RuleSetError):
    """Two rules share the same head."""


class MismatchedHeadError(RuleSetError):
    """A rule is registered under a key other than its own head."""


class DanglingReferenceError(RuleSetError):
    """A reference literal names a head that is not defined."""


class SelfReferenceError(RuleSetError):
    """A rule references its own head."""


class CyclicReferenceError(RuleSetError):
    """Rule references form a cycle (A -> B -> ... -> A)."""

    def __init__(self, path):
        self.path = tuple(path)
        super().__init__(
            "Rule references form a cycle: " + " -> ".join(f"#{h}" for h in self.path)
        )


class InvalidLiteralError(RuleSetError):
    """A literal is empty or holds elements of the wrong shape."""


class AdjacentWildcardError(InvalidLiteralError):
    """Two wildcard markers follow each other in one literal."""


class MalformedPatternError(RuleSetError):
    """A pattern reached the matcher in a shape validation should have rejected."""


class UnresolvedReferenceError(RuleSetError):
    """A reference literal was evaluated without a rule set to resolve it."""


class RuleLoadError(RuleSetError):
    """A rule document could not be read or has the wrong structure."""
