"""
Type Introspection

Classify runtime values and declared types for the walker and the rule resolver.

Value categories:
- record: dataclass instance, pydantic model, named tuple
- mapping: Mapping, DataFrame (column -> Series) and Series when both sides
  have unique labels
- sequence: list/tuple/deque and other Sequences, ndarray (ndim >= 1),
  DataFrame (columns by position) and Series with duplicate labels
- leaf: everything else (compared with ==, pd.NA and pd.NaT equal each other)

Declared types come from annotations: dataclass and NamedTuple fields,
pydantic field annotations, container parameters (list[T], dict[K, V]) and
function signatures.
"""

import collections.abc
import dataclasses
import functools
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel


RECORD = 'record'
MAPPING = 'mapping'
SEQUENCE = 'sequence'
LEAF = 'leaf'

_UNION_TYPES = (Union, getattr(types, 'UnionType', Union))
_NONE_TYPE = type(None)


@dataclass(frozen=True)
class RecordField:
    """Field descriptor handed to field readers."""
    name: str
    index: int
    type: Any
    unexported: bool


# DECLARED TYPES

def strip_annotated(t: Any) -> Any:
    if typing.get_origin(t) is typing.Annotated:
        return typing.get_args(t)[0]
    return t


def is_union(t: Any) -> bool:
    return typing.get_origin(t) in _UNION_TYPES


def optional_target(t: Any) -> Optional[Any]:
    """Return T for Optional[T] (a union of exactly one type and None)."""
    t = strip_annotated(t)
    if not is_union(t):
        return None
    args = typing.get_args(t)
    members = [a for a in args if a is not _NONE_TYPE]
    if len(members) == 1 and len(args) == 2:
        return members[0]
    return None


def is_universal(t: Any) -> bool:
    """True for parameter types that accept any value."""
    t = strip_annotated(t)
    return (t is None or t is Any or t is object
            or t is inspect.Parameter.empty or isinstance(t, TypeVar))


def is_open_type(t: Any) -> bool:
    """True for declared types that may hold values of several classes."""
    t = strip_annotated(t)
    if t is Any or t is object or isinstance(t, TypeVar):
        return True
    if is_union(t):
        return True
    origin = typing.get_origin(t) or t
    if isinstance(origin, type):
        return inspect.isabstract(origin) or bool(getattr(origin, '_is_protocol', False))
    return False


def assignable(node_type: Any, param: Any) -> bool:
    """
    Static check that a rule declared for `param` applies to nodes of `node_type`.

    Identity, Union membership (for union parameters) and subclassing of the
    origin classes count; open node types only match universal parameters.
    """
    if is_universal(param):
        return True
    node_type = strip_annotated(node_type)
    param = strip_annotated(param)
    if node_type == param:
        return True
    if is_union(param):
        return any(assignable(node_type, p) for p in typing.get_args(param))
    if node_type is Any or is_union(node_type):
        return False
    node_cls = typing.get_origin(node_type) or node_type
    param_cls = typing.get_origin(param) or param
    if not isinstance(node_cls, type) or not isinstance(param_cls, type):
        return False
    try:
        return issubclass(node_cls, param_cls)
    except TypeError:
        return False


def element_type(t: Any, index: int) -> Optional[Any]:
    """Declared element type of a sequence type at `index`, or None if undeclared."""
    t = strip_annotated(t)
    origin = typing.get_origin(t)
    args = typing.get_args(t)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return args[index] if index < len(args) else None
    if len(args) == 1:
        return args[0]
    return None


def mapping_value_type(t: Any) -> Optional[Any]:
    """Declared value type of a mapping type, or None if undeclared."""
    t = strip_annotated(t)
    if t is pd.DataFrame:
        return pd.Series
    args = typing.get_args(t)
    if len(args) == 2:
        return args[1]
    return None


@functools.lru_cache(maxsize=None)
def class_hints(cls: type) -> Dict[str, Any]:
    """Resolved annotations of a class; unresolvable ones are left out."""
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except Exception:
        hints = {}
        for klass in reversed(cls.__mro__):
            for name, ann in getattr(klass, '__annotations__', {}).items():
                if not isinstance(ann, str):
                    hints[name] = ann
        return hints


def function_types(fn: Callable, arity: int) -> Tuple[List[Any], Optional[Any]]:
    """
    Declared positional parameter types and return type of a rule function.

    Args:
        fn: Rule function (plain function, bound method, callable object)
        arity: Number of positional parameters the rule calls it with

    Returns:
        (parameter types, return type); unannotated entries are None
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return [None] * arity, None

    positional = [
        p for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    has_varargs = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in sig.parameters.values())
    required = [p for p in positional if p.default is inspect.Parameter.empty]
    if len(required) > arity or (len(positional) < arity and not has_varargs):
        raise TypeError(f"{getattr(fn, '__name__', fn)!r} must accept {arity} positional argument(s)")

    target = fn if inspect.isfunction(fn) or inspect.ismethod(fn) else getattr(fn, '__call__', fn)
    try:
        hints = typing.get_type_hints(target)
    except Exception:
        hints = {}

    params = []
    for p in positional[:arity]:
        params.append(hints.get(p.name))
    params.extend([None] * (arity - len(params)))
    return params, hints.get('return')


@functools.lru_cache(maxsize=None)
def equal_method(cls: type) -> Optional[Callable]:
    """Return cls.equal when it has the shape equal(self, other) -> bool."""
    method = getattr(cls, 'equal', None)
    if method is None or not inspect.isfunction(method):
        return None
    params = list(inspect.signature(method).parameters.values())
    if len(params) != 2 or any(p.kind not in (inspect.Parameter.POSITIONAL_ONLY,
                                              inspect.Parameter.POSITIONAL_OR_KEYWORD) for p in params):
        return None
    try:
        returns = typing.get_type_hints(method).get('return', bool)
    except Exception:
        returns = bool
    if returns is not bool:
        return None
    return method


# RUNTIME VALUES

def is_record(value: Any) -> bool:
    if isinstance(value, type):
        return False
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True
    return isinstance(value, tuple) and hasattr(type(value), '_fields')


def _unique_labels(value: Any) -> bool:
    if isinstance(value, pd.DataFrame):
        return value.columns.is_unique
    if isinstance(value, pd.Series):
        return value.index.is_unique
    return True


def value_kind(value: Any, other: Any = None) -> str:
    """Category of a runtime value (RECORD, MAPPING, SEQUENCE or LEAF).

    Frames and series are keyed by label only when the labels on both sides
    are unique; otherwise they are compared by position.
    """
    if isinstance(value, (pd.DataFrame, pd.Series)):
        return MAPPING if _unique_labels(value) and _unique_labels(other) else SEQUENCE
    if isinstance(value, np.ndarray):
        return SEQUENCE if value.ndim >= 1 else LEAF
    if is_record(value):
        return RECORD
    if isinstance(value, collections.abc.Mapping):
        return MAPPING
    if isinstance(value, collections.abc.Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return SEQUENCE
    return LEAF


@functools.lru_cache(maxsize=None)
def _record_fields(cls: type) -> Tuple[RecordField, ...]:
    hints = class_hints(cls)
    if issubclass(cls, BaseModel):
        names = list(cls.model_fields) + list(getattr(cls, '__private_attributes__', {}))
    elif dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = list(cls._fields)

    out = []
    for index, name in enumerate(names):
        declared = hints.get(name)
        if declared is None and issubclass(cls, BaseModel) and name in cls.model_fields:
            declared = cls.model_fields[name].annotation
        out.append(RecordField(name=name, index=index, type=declared, unexported=name.startswith('_')))
    return tuple(out)


def record_fields(value: Any) -> Tuple[RecordField, ...]:
    """Fields of a record value in declaration order."""
    return _record_fields(type(value))


def as_mapping(value: Any) -> collections.abc.Mapping:
    """Key/value view of a MAPPING value."""
    if isinstance(value, pd.DataFrame):
        return {col: value.iloc[:, i] for i, col in enumerate(value.columns)}
    if isinstance(value, pd.Series):
        return dict(value.items())
    return value


def as_sequence(value: Any) -> List[Any]:
    """Positional view of a SEQUENCE value.

    ndarrays split along axis 0, frames into their columns by position.
    """
    if isinstance(value, pd.DataFrame):
        return [value.iloc[:, i] for i in range(value.shape[1])]
    if isinstance(value, pd.Series):
        return value.tolist()
    return list(value)


def sorted_keys(x: collections.abc.Mapping, y: collections.abc.Mapping) -> List[Any]:
    """Union of the keys of both mappings in a deterministic order."""
    keys = list(x)
    seen = set(keys)
    keys.extend(k for k in y if k not in seen)
    try:
        return sorted(keys)
    except TypeError:
        return sorted(keys, key=lambda k: (type(k).__name__, repr(k)))


def render_value(value: Any) -> str:
    """Single-line text for a compared value."""
    if isinstance(value, np.generic):
        return repr(value.item())
    if isinstance(value, np.ndarray):
        return repr(value.tolist())
    if isinstance(value, pd.DataFrame):
        return repr(value.to_dict(orient='list'))
    if isinstance(value, pd.Series):
        return repr(value.to_dict())
    return repr(value)


def _is_null_scalar(value: Any) -> bool:
    return value is pd.NA or value is pd.NaT


def leaf_equal(x: Any, y: Any) -> bool:
    """== for leaves; pd.NA and pd.NaT only equal another missing marker."""
    if _is_null_scalar(x) or _is_null_scalar(y):
        return _is_null_scalar(x) and _is_null_scalar(y)
    return bool(x == y)
