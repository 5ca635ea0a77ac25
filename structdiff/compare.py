"""
Structural comparison.

equal(x, y, *rules) walks both values in lockstep, depth first, asking the
rule resolver at every node what to do:

1. Ignore / Comparer / Transformer chosen by the rules
2. Optional[T] nodes: None handling, then dereference (Indirect step)
3. Open types (Any, unions, abstract classes): narrow to the runtime class
4. Types with an equal(self, other) method: decided by that method
5. Records, mappings and sequences: recurse per field / key / index
6. Everything else: == (missing-value markers such as pd.NA equal each other)

Each leaf produces one ReportRecord. A difference anywhere makes the result
unequal; configuration and invariant errors abort the call.
"""

import logging
from typing import Any, Callable, List, Set, Tuple

from .errors import NonDeterministicFunctionError, UnexportedFieldError
from .fieldaccess import read_field
from .options import Comparer, Ignore, RuleResolver, Transformer
from .path import (
    Indirect, MapIndex, Path, Root, SliceIndex, StructField, Transform, TypeAssertion, type_name,
)
from .report import DIFFER, EQUAL, IGNORED, NON_EXISTENT, DiffReporter, ReportRecord
from .typeinfo import (
    LEAF, MAPPING, RECORD, SEQUENCE, as_mapping, as_sequence, element_type, equal_method,
    is_open_type, leaf_equal, mapping_value_type, optional_target, record_fields, render_value,
    sorted_keys, value_kind,
)

logger = logging.getLogger(__name__)


class _Missing:
    """Placeholder for a position or key present on one side only."""

    def __repr__(self) -> str:
        return NON_EXISTENT


class _Hidden:
    """Placeholder for a non-public field that may not be read."""

    def __repr__(self) -> str:
        return '<unexported>'


MISSING = _Missing()
HIDDEN = _Hidden()


def _infer(declared: Any, x: Any, y: Any) -> Any:
    if declared is not None:
        return declared
    if type(x) is type(y):
        return type(x)
    return Any


def _func_name(fn: Callable) -> str:
    return getattr(fn, '__qualname__', None) or repr(fn)


class DynChecker:
    """
    Decides which calls of user functions get probed for symmetry and determinism.

    Probes happen on call 1, then after 1, 2, 3, ... further calls (triangular
    spacing).
    """

    def __init__(self):
        self.curr = 0
        self.next = 0

    def probe(self) -> bool:
        ok = self.curr == self.next
        if ok:
            self.curr = 0
            self.next += 1
        self.curr += 1
        return ok


class _State:
    """Per-call traversal state: path, rules, cycle set and record observers."""

    def __init__(self, rules, observers: List[Callable[[ReportRecord], None]],
                 field_reader: Callable = read_field):
        self.resolver = RuleResolver(rules)
        self.observers = observers
        self.field_reader = field_reader
        self.path = Path()
        self.checker = DynChecker()
        self.visited: Set[Tuple[int, int, int]] = set()
        self.transforms = 0
        self.leaves = 0
        self.differs = 0

    def compare_root(self, x: Any, y: Any) -> None:
        self.path.push(Root(_infer(None, x, y)))
        try:
            self.compare_any(x, y)
        finally:
            self.path.pop()
        logger.debug("compared %s: %d leaves, %d differences",
                     type_name(_infer(None, x, y)), self.leaves, self.differs)

    # REPORTING

    def report(self, kind: str, x: Any, y: Any) -> None:
        self.leaves += 1
        if kind == DIFFER:
            self.differs += 1
        if not self.observers:
            return
        record = ReportRecord(path=self.path.copy(), kind=kind,
                              old=render_value(x), new=render_value(y))
        for observe in self.observers:
            observe(record)

    def call_pair(self, fn: Callable, x: Any, y: Any) -> bool:
        """Call a binary user function, probing it on scheduled calls."""
        want = bool(fn(x, y))
        if self.checker.probe():
            if bool(fn(y, x)) != want or bool(fn(x, y)) != want:
                raise NonDeterministicFunctionError(
                    f"non-deterministic or non-symmetric function detected: {_func_name(fn)}",
                    path=self.path.render()
                )
        return want

    # TRAVERSAL

    def descend(self, step, x: Any, y: Any) -> None:
        self.path.push(step)
        try:
            if x is MISSING or y is MISSING:
                self.report(DIFFER, x, y)
            else:
                self.compare_any(x, y)
        finally:
            self.path.pop()

    def compare_any(self, x: Any, y: Any) -> None:
        rule = self.resolver.resolve(self.path, x, y, self.call_pair)
        if rule is not None:
            self.apply(rule, x, y)
            return

        node_type = self.path.last.type

        target = optional_target(node_type)
        if target is not None:
            if x is None or y is None:
                self.report(EQUAL if x is None and y is None else DIFFER, x, y)
                return
            self.descend(Indirect(target), x, y)
            return

        if is_open_type(node_type):
            if x is None or y is None:
                self.report(EQUAL if x is None and y is None else DIFFER, x, y)
                return
            if type(x) is not type(y):
                self.report(DIFFER, x, y)
                return
            self.descend(TypeAssertion(type(x)), x, y)
            return

        if type(x) is not type(y):
            self.report(DIFFER, x, y)
            return

        method = equal_method(type(x))
        if method is not None:
            self.report(EQUAL if self.call_pair(method, x, y) else DIFFER, x, y)
            return

        kind = value_kind(x, y)
        if kind == LEAF:
            self.report(EQUAL if leaf_equal(x, y) else DIFFER, x, y)
            return

        key = (id(x), id(y), self.transforms)
        if key in self.visited:
            # cycle on the active branch closes as equal
            self.report(EQUAL, x, y)
            return
        self.visited.add(key)
        try:
            if kind == RECORD:
                self.compare_record(x, y)
            elif kind == MAPPING:
                self.compare_mapping(x, y, node_type)
            elif kind == SEQUENCE:
                self.compare_sequence(x, y, node_type)
        finally:
            self.visited.discard(key)

    def apply(self, rule, x: Any, y: Any) -> None:
        if isinstance(rule, Ignore):
            self.report(IGNORED, x, y)
        elif isinstance(rule, Comparer):
            self.report(EQUAL if self.call_pair(rule.fn, x, y) else DIFFER, x, y)
        elif isinstance(rule, Transformer):
            tx, ty = rule.fn(x), rule.fn(y)
            self.transforms += 1
            try:
                self.descend(Transform(_infer(rule.out_type, tx, ty), rule), tx, ty)
            finally:
                self.transforms -= 1

    def compare_record(self, x: Any, y: Any) -> None:
        visible = type(x) in self.resolver.visible
        for fld in record_fields(x):
            if fld.unexported and not visible:
                self.compare_hidden(fld)
                continue
            if fld.unexported:
                vx, vy = self.field_reader(x, fld), self.field_reader(y, fld)
            else:
                vx, vy = getattr(x, fld.name), getattr(y, fld.name)
            self.descend(StructField(_infer(fld.type, vx, vy), fld.name, fld.index, fld.unexported), vx, vy)

    def compare_hidden(self, fld) -> None:
        self.path.push(StructField(fld.type if fld.type is not None else Any,
                                   fld.name, fld.index, fld.unexported))
        try:
            rule = self.resolver.resolve(self.path, HIDDEN, HIDDEN, None)
            if isinstance(rule, Ignore):
                self.report(IGNORED, HIDDEN, HIDDEN)
                return
            raise UnexportedFieldError(
                f"cannot handle unexported field at {self.path.render()}\n"
                f"consider using allow_unexported({type_name(self.path[-2].type)}) "
                "or ignore_unexported to skip it",
                path=self.path.render()
            )
        finally:
            self.path.pop()

    def compare_sequence(self, x: Any, y: Any, node_type: Any) -> None:
        xs, ys = as_sequence(x), as_sequence(y)
        for i in range(max(len(xs), len(ys))):
            vx = xs[i] if i < len(xs) else MISSING
            vy = ys[i] if i < len(ys) else MISSING
            self.descend(SliceIndex(_infer(element_type(node_type, i), vx, vy), i), vx, vy)

    def compare_mapping(self, x: Any, y: Any, node_type: Any) -> None:
        mx, my = as_mapping(x), as_mapping(y)
        value_type = mapping_value_type(node_type)
        for k in sorted_keys(mx, my):
            vx = mx[k] if k in mx else MISSING
            vy = my[k] if k in my else MISSING
            self.descend(MapIndex(_infer(value_type, vx, vy), k), vx, vy)


# PUBLIC API

def equal(x: Any, y: Any, *rules, field_reader: Callable = read_field) -> bool:
    """
    Report whether x and y are structurally equal under the given rules.

    Args:
        x, y: Values to compare
        rules: Rules and rule sets (see structdiff.options)
        field_reader: Reader for allowlisted non-public fields

    Returns:
        True when no leaf differs

    Raises:
        ConfigurationError: Unknown, unfiltered or ambiguous rules
        InvariantViolation: Unexported field outside the allowlist, or a
            non-deterministic/non-symmetric comparer or predicate
    """
    state = _State(rules, observers=[], field_reader=field_reader)
    state.compare_root(x, y)
    return state.differs == 0


def diff(x: Any, y: Any, *rules, field_reader: Callable = read_field) -> str:
    """Human-readable report of the differences between x and y ("" when equal)."""
    reporter = DiffReporter()
    state = _State(rules, observers=[reporter.report], field_reader=field_reader)
    state.compare_root(x, y)
    return str(reporter)


def report(x: Any, y: Any, *rules, field_reader: Callable = read_field) -> List[ReportRecord]:
    """Every leaf record of the comparison in traversal order."""
    records: List[ReportRecord] = []
    state = _State(rules, observers=[records.append], field_reader=field_reader)
    state.compare_root(x, y)
    return records
