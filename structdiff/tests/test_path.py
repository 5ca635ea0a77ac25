"""Path rendering and name validation."""

from decimal import Decimal
from typing import Any, List, Optional

import numpy as np
import pandas as pd
import pytest

from structdiff import InvalidNameError, transformer
from structdiff.path import (
    Indirect, MapIndex, Path, Root, SliceIndex, StructField, Transform, TypeAssertion,
    is_valid_name, type_name,
)
from structdiff.tests.teststructs import Boxed, Dreamer, Eagle, Goat, GoatImmutable, Holder


def _to_float(v: int) -> float:
    return float(v)


def _to_decimal(v: float) -> Decimal:
    return Decimal(v)


def _to_str(v: Decimal) -> str:
    return str(v)


def test_simplified_rendering_joins_field_names():
    path = Path([
        Root(Eagle),
        StructField(List[Dreamer], "Slaps"),
        SliceIndex(Dreamer, 0),
        StructField(Optional[GoatImmutable], "Immutable"),
        Indirect(GoatImmutable),
        StructField(str, "ID"),
    ])
    assert str(path) == "Slaps.Immutable.ID"


def test_full_rendering_with_type_assertion_and_elided_indirect():
    path = Path([
        Root(Eagle),
        StructField(List[Dreamer], "dreamers"),
        SliceIndex(Dreamer, 1),
        StructField(List[Any], "animal"),
        SliceIndex(Any, 0),
        TypeAssertion(Goat),
        StructField(Optional[GoatImmutable], "immutable"),
        Indirect(GoatImmutable),
        StructField(int, "state"),
    ])
    assert path.render() == (
        "{teststructs.Eagle}.dreamers[1].animal[0].(teststructs.Goat).immutable.state"
    )
    assert str(path) == "dreamers.animal.immutable.state"


def test_trailing_indirect_renders_as_prefix_without_parens():
    path = Path([Root(Holder), StructField(Optional[int], "a"), Indirect(int)])
    assert path.render() == "*{teststructs.Holder}.a"

    chain = Path([Root(int), Indirect(int), Indirect(int), Indirect(int)])
    assert chain.render() == "***{int}"


def test_indirect_run_before_field_drops_one_level():
    path = Path([Root(Eagle), Indirect(Eagle), Indirect(Eagle), StructField(str, "name")])
    assert path.render() == "(*{teststructs.Eagle}).name"

    single = Path([Root(Eagle), Indirect(Eagle), StructField(str, "name")])
    assert single.render() == "{teststructs.Eagle}.name"


def test_nested_transforms_wrap_everything_before_them():
    t1 = transformer("", _to_float)
    t2 = transformer("", _to_decimal)
    t3 = transformer("", _to_str)
    path = Path([Root(int), Transform(float, t1), Transform(Decimal, t2), Transform(str, t3)])
    assert path.render() == "λ(λ(λ({int})))"

    indexed = Path([Root(list), SliceIndex(int, 1), Transform(float, t1)])
    assert indexed.render() == "λ({list}[1])"


def test_type_assertion_before_transform_is_elided():
    stringify = transformer("Stringify", _to_str)
    path = Path([
        Root(Boxed),
        StructField(Any, "value"),
        TypeAssertion(Decimal),
        Transform(str, stringify),
    ])
    assert path.render() == "Stringify({teststructs.Boxed}.value)"


def test_map_keys_render_with_repr():
    path = Path([Root(dict), MapIndex(int, "albus"), SliceIndex(int, 2)])
    assert path.render() == "{dict}['albus'][2]"
    assert Path([Root(dict), MapIndex(int, 17)]).render() == "{dict}[17]"


def test_root_without_printable_type():
    assert Path([Root(None)]).render() == "root"


def test_step_accessors():
    step = StructField(int, "count", 2, False)
    assert step.type is int
    assert step.name == "count"
    assert step.index == 2
    assert SliceIndex(str, 4).key == 4
    assert MapIndex(str, "k").key == "k"

    sort = transformer("Sort", sorted)
    t = Transform(list, sort)
    assert t.name == "Sort"
    assert t.func is sorted


def test_push_pop_and_last():
    path = Path()
    path.push(Root(Holder))
    path.push(StructField(Optional[int], "a"))
    assert len(path) == 2
    assert path.last.name == "a"
    snapshot = path.copy()
    path.pop()
    assert len(path) == 1
    assert len(snapshot) == 2


def test_type_names():
    assert type_name(int) == "int"
    assert type_name(Holder) == "teststructs.Holder"
    assert type_name(List[int]) == "List[int]"
    assert type_name(Any) == "Any"
    assert type_name(type(None)) == "None"


def test_type_names_use_public_package_for_reexported_classes():
    assert type_name(pd.Series) == "pandas.Series"
    assert type_name(pd.DataFrame) == "pandas.DataFrame"
    assert type_name(np.ndarray) == "numpy.ndarray"
    assert type_name(Decimal) == "decimal.Decimal"


def test_name_validation():
    for good in ("Sort", "sort_2", "_private", "λ"):
        assert is_valid_name(good), good
    for bad in ("", "_", "2x", "has space", "dash-name"):
        assert not is_valid_name(bad), bad


def test_transformer_names():
    assert transformer("", _to_float).name == "λ"
    assert transformer("Float", _to_float).name == "Float"
    with pytest.raises(InvalidNameError):
        transformer("_", _to_float)
    with pytest.raises(InvalidNameError):
        transformer("2x", _to_float)
