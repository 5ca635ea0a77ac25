"""
Comparison rules and their resolution.

Rule values are immutable and reusable across calls:
- ignore(): terminal, the node is skipped
- comparer(fn): terminal, fn(x, y) -> bool decides the node
- transformer(name, fn): non-terminal, both sides are replaced by fn(v)
- filter_path(pred, rule) / filter_values(pred, rule): scope a rule
- allow_unexported(*types): allowlist for non-public record fields

Lists and tuples of rules are rule sets and may nest arbitrarily.

Rules whose function parameter is annotated apply only to nodes whose type
matches the annotation. Bare rules that would match everything are rejected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Optional, Tuple

from .errors import AmbiguousOptionError, InvalidNameError, UnfilteredOptionError, UnknownOptionError
from .path import ANONYMOUS_TRANSFORM, Path, Transform, is_valid_name
from .typeinfo import assignable, function_types, is_universal

logger = logging.getLogger(__name__)


class Option:
    """Base class of every comparison rule."""


class RuleSet(tuple, Option):
    """Ordered group of rules; lists and tuples are accepted wherever a RuleSet is."""

    def __new__(cls, *rules):
        return super().__new__(cls, rules)

    def __repr__(self) -> str:
        return f"RuleSet{tuple.__repr__(self)}"


@dataclass(frozen=True)
class Ignore(Option):
    def applies_to(self, node_type: Any, path: Path) -> bool:
        return True

    @property
    def universal(self) -> bool:
        return True


@dataclass(frozen=True)
class Comparer(Option):
    fn: Callable
    param_type: Any = field(default=None, compare=False)

    def applies_to(self, node_type: Any, path: Path) -> bool:
        return assignable(node_type, self.param_type)

    @property
    def universal(self) -> bool:
        return is_universal(self.param_type)


@dataclass(frozen=True)
class Transformer(Option):
    name: str
    fn: Callable
    in_type: Any = field(default=None, compare=False)
    out_type: Any = field(default=None, compare=False)

    def applies_to(self, node_type: Any, path: Path) -> bool:
        if not assignable(node_type, self.in_type):
            return False
        # never re-apply to a value this transformer produced
        for step in reversed(list(path)):
            if not isinstance(step, Transform):
                break
            if step.transformer is self:
                return False
        return True

    @property
    def universal(self) -> bool:
        return is_universal(self.in_type)


@dataclass(frozen=True)
class PathFilter(Option):
    predicate: Callable
    option: Any


@dataclass(frozen=True)
class ValuesFilter(Option):
    predicate: Callable
    option: Any
    param_type: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class AllowUnexported(Option):
    types: FrozenSet[type]


TERMINAL_RULES = (Ignore, Comparer, Transformer)
FILTER_RULES = (PathFilter, ValuesFilter)


# CONSTRUCTORS

def ignore() -> Ignore:
    """Rule that skips a node entirely. Must be scoped by a filter."""
    return Ignore()


def comparer(fn: Callable) -> Comparer:
    """
    Rule that decides equality of a node with fn(x, y) -> bool.

    fn must be pure, deterministic and symmetric. The annotation of its first
    parameter limits the node types it applies to.
    """
    if not callable(fn):
        raise TypeError(f"invalid comparer function: {fn!r}")
    params, _ = function_types(fn, 2)
    return Comparer(fn=fn, param_type=params[0])


def transformer(name: str, fn: Callable) -> Transformer:
    """
    Rule that replaces both sides of a node with fn(v) and compares the results.

    An empty name is rendered as λ in paths. The return annotation of fn
    becomes the declared type of the transformed node.
    """
    if not callable(fn):
        raise TypeError(f"invalid transformer function: {fn!r}")
    if name == "":
        name = ANONYMOUS_TRANSFORM
    elif not is_valid_name(name):
        raise InvalidNameError(f"invalid name: {name!r}")
    params, returns = function_types(fn, 1)
    return Transformer(name=name, fn=fn, in_type=params[0], out_type=returns)


def filter_path(predicate: Callable, rule: Any) -> PathFilter:
    """Scope `rule` to nodes whose Path satisfies predicate(path)."""
    if not callable(predicate):
        raise TypeError(f"invalid path filter function: {predicate!r}")
    return PathFilter(predicate=predicate, option=rule)


def filter_values(predicate: Callable, rule: Any) -> ValuesFilter:
    """
    Scope `rule` to nodes whose values satisfy predicate(x, y).

    The predicate must be symmetric and deterministic; the annotation of its
    first parameter limits the node types it is evaluated on.
    """
    if not callable(predicate):
        raise TypeError(f"invalid values filter function: {predicate!r}")
    params, _ = function_types(predicate, 2)
    return ValuesFilter(predicate=predicate, option=rule, param_type=params[0])


def allow_unexported(*types: type) -> AllowUnexported:
    """Allow reading non-public fields of exactly the given record types."""
    for t in types:
        if not isinstance(t, type):
            raise TypeError(f"invalid record type: {t!r}")
    return AllowUnexported(types=frozenset(types))


def ignore_unexported(*types: type) -> PathFilter:
    """Ignore the non-public fields of the given record types."""
    wanted = frozenset(types)

    def _unexported_field_of(path: Path) -> bool:
        if len(path) < 2:
            return False
        step = path[-1]
        return getattr(step, 'unexported', False) and path[-2].type in wanted

    return filter_path(_unexported_field_of, ignore())


# RESOLUTION

@dataclass(frozen=True)
class ScopedRule:
    filters: Tuple[Option, ...]
    rule: Option


class RuleResolver:
    """
    Flattened rule set queried by the walker at every node.

    Scoped rules (under at least one filter) are tried first, in declaration
    order, and the first match wins. Bare rules are then matched by node type;
    several candidates must agree or the node is ambiguous.
    """

    def __init__(self, rules):
        self.scoped: List[ScopedRule] = []
        self.typed: List[Option] = []
        self.visible: FrozenSet[type] = frozenset()
        self._flatten(rules, ())
        logger.debug(
            "resolved rules: %d scoped, %d type-matched, %d allowlisted types",
            len(self.scoped), len(self.typed), len(self.visible)
        )

    def _flatten(self, rule: Any, filters: Tuple[Option, ...]) -> None:
        if isinstance(rule, (list, tuple)):
            for item in rule:
                self._flatten(item, filters)
        elif isinstance(rule, FILTER_RULES):
            self._flatten(rule.option, filters + (rule,))
        elif isinstance(rule, AllowUnexported):
            if filters:
                raise UnknownOptionError(f"unknown option: allow_unexported cannot be filtered: {rule!r}")
            self.visible = self.visible | rule.types
        elif isinstance(rule, TERMINAL_RULES):
            if filters:
                self.scoped.append(ScopedRule(filters=filters, rule=rule))
            elif rule.universal:
                raise UnfilteredOptionError(f"cannot use an unfiltered option: {rule!r}")
            else:
                self.typed.append(rule)
        else:
            raise UnknownOptionError(f"unknown option: {type(rule).__name__}: {rule!r}")

    def resolve(self, path: Path, x: Any, y: Any, call_pair: Callable) -> Optional[Option]:
        """
        Pick the rule for the node at the end of `path`.

        Args:
            path: Current path; path.last.type is the node type
            x, y: Node values
            call_pair: Walker hook that invokes a binary function with
                symmetry/determinism probing; None when the values cannot be
                read, in which case value filters never match

        Returns:
            Ignore, Comparer or Transformer; None for default recursion
        """
        node_type = path.last.type
        for scoped in self.scoped:
            if self._matches(scoped, node_type, path, x, y, call_pair):
                return scoped.rule

        candidates = [r for r in self.typed if r.applies_to(node_type, path)]
        if not candidates:
            return None
        first = candidates[0]
        if any(c != first for c in candidates[1:]):
            raise AmbiguousOptionError(
                f"ambiguous set of options at {path.render()}: {candidates!r}\n"
                "consider using filters to ensure at most one applies",
                path=path.render()
            )
        return first

    @staticmethod
    def _matches(scoped: ScopedRule, node_type: Any, path: Path, x: Any, y: Any,
                 call_pair: Callable) -> bool:
        for flt in scoped.filters:
            if isinstance(flt, PathFilter):
                if not flt.predicate(path):
                    return False
            else:
                if call_pair is None or not assignable(node_type, flt.param_type):
                    return False
                if not call_pair(flt.predicate, x, y):
                    return False
        return scoped.rule.applies_to(node_type, path)
