"""JSON contracts, tolerance presets and the error taxonomy."""

import pytest

from structdiff import (
    ComparatorConfig, ComparisonErrorTaxonomy, ContractError, UnfilteredOptionError,
    compile_contract, diff, equal, ignore, report,
)
from structdiff.contract import dotted_path, path_matcher
from structdiff.path import MapIndex, Path, Root, SliceIndex, StructField


BASELINE = {
    "meta": {"run_id": "run_001", "engine": "v1"},
    "metrics": {"revenue": 10000.0, "orders": 120},
    "ratios": {"margin": 0.42},
    "tags": ["east", "north", "west"],
}


def _candidate(**overrides):
    out = {
        "meta": {"run_id": "run_002", "engine": "v1"},
        "metrics": {"revenue": 10000.5, "orders": 120},
        "ratios": {"margin": 0.43},
        "tags": ["west", "east", "north"],
    }
    out.update(overrides)
    return out


CONTRACT = {
    "schema_version": "1.0",
    "rules": [
        {"id": "r1", "type": "ignore", "path": "meta.run_id"},
        {"id": "r2", "type": "approx", "path": "metrics.*", "preset": "profit"},
        {"id": "r3", "type": "approx", "path": "ratios.*", "preset": "percentage"},
        {"id": "r4", "type": "unordered", "path": "tags"},
    ],
}


def test_contract_accepts_tolerated_differences():
    rules = compile_contract(CONTRACT)
    assert not equal(BASELINE, _candidate())
    assert equal(BASELINE, _candidate(), rules)


def test_contract_reports_real_differences():
    rules = compile_contract(CONTRACT)
    candidate = _candidate(metrics={"revenue": 10100.0, "orders": 121})
    out = diff(BASELINE, candidate, rules)
    assert out == (
        "{dict}['metrics']['orders']:\n\t-: 120\n\t+: 121\n"
        "{dict}['metrics']['revenue']:\n\t-: 10000.0\n\t+: 10100.0\n"
    )


def test_approx_handles_int_float_mix():
    rules = compile_contract({"rules": [{"type": "approx", "rel_tol": 0.01}]})
    assert equal({"a": 100}, {"a": 100.5}, rules)
    assert not equal({"a": 100}, {"a": 150}, rules)


def test_abs_tol_is_plain_absolute():
    rules = compile_contract({"rules": [{"type": "approx", "path": "x", "abs_tol": 0.5}]})
    assert equal({"x": 1.0}, {"x": 1.4}, rules)
    assert not equal({"x": 1.0}, {"x": 1.6}, rules)


def test_ignored_leaves_are_reported_as_ignored():
    records = report(BASELINE, _candidate(), compile_contract(CONTRACT))
    ignored = [r for r in records if r.kind == "ignored"]
    assert [str(r.path) for r in ignored] == [""]
    assert [r.path.render() for r in ignored] == ["{dict}['meta']['run_id']"]


def test_malformed_contracts():
    with pytest.raises(ContractError):
        compile_contract([])
    with pytest.raises(ContractError):
        compile_contract({"rules": {"type": "ignore"}})
    with pytest.raises(ContractError, match="not an object"):
        compile_contract({"rules": ["ignore"]})
    with pytest.raises(ContractError, match="unknown contract rule type"):
        compile_contract({"rules": [{"id": "x", "type": "regex", "path": "a"}]})
    with pytest.raises(ContractError, match="requires a path"):
        compile_contract({"rules": [{"type": "ignore"}]})
    with pytest.raises(ContractError, match="approx requires"):
        compile_contract({"rules": [{"type": "approx", "path": "a"}]})
    with pytest.raises(ContractError, match="unknown tolerance preset"):
        compile_contract({"rules": [{"type": "approx", "path": "a", "preset": "fuzzy"}]})


def test_dotted_paths_skip_sequence_positions():
    path = Path([
        Root(dict), MapIndex(list, "items"), SliceIndex(dict, 3), MapIndex(float, "price"),
    ])
    assert dotted_path(path) == ["items", "price"]
    assert path_matcher("items.price")(path)
    assert path_matcher("*.price")(path)
    assert not path_matcher("items")(path)
    assert path_matcher(None)(path)

    record_path = Path([Root(dict), StructField(int, "orders")])
    assert path_matcher("orders")(record_path)


def test_unordered_only_sorts_the_addressed_sequence():
    rules = compile_contract({"rules": [{"type": "unordered", "path": "tags"}]})
    assert equal({"tags": [[1, 2], [3]]}, {"tags": [[3], [1, 2]]}, rules)
    assert not equal({"tags": [[2, 1]]}, {"tags": [[1, 2]]}, rules)
    out = diff({"tags": [[2, 1]]}, {"tags": [[1, 2]]}, rules)
    assert out.startswith("Sort({dict}['tags'])[0][0]:\n\t-: 2\n\t+: 1\n")


def test_tolerance_presets():
    profit = ComparatorConfig.for_profit_metrics()
    assert profit.within_tolerance(10000.0, 10000.5)
    assert not profit.within_tolerance(10000.0, 10100.0)

    aggregation = ComparatorConfig.for_aggregation_metrics()
    assert aggregation.within_tolerance(1000.0, 1001.0)

    count = ComparatorConfig.for_count_metrics()
    assert not count.within_tolerance(1000, 1001)
    assert count.within_tolerance(0, 0)

    pct = ComparatorConfig.for_percentage_metrics()
    assert pct.within_tolerance(0.42, 0.43)
    assert not pct.within_tolerance(0.42, 0.50)
    assert pct.within_tolerance(42.0, 43.0)

    assert pct.to_dict() == {
        "numeric_tolerance": 1.0,
        "tolerance_mode": "absolute",
        "percentage_scale": None,
    }


def test_tolerance_is_symmetric():
    for config in (ComparatorConfig.for_profit_metrics(), ComparatorConfig.for_percentage_metrics()):
        for x, y in ((1.0, 1.00005), (0.42, 0.45), (100.0, 0.0)):
            assert config.within_tolerance(x, y) == config.within_tolerance(y, x)


def test_tolerance_rule_in_equal():
    rule = ComparatorConfig.for_aggregation_metrics().to_rule()
    assert equal([1000.0, 5], [1001.0, 5], rule)
    assert not equal([1000.0, True], [1001.0, False], rule)
    assert not equal([float("nan")], [float("nan")], rule)


def test_invalid_tolerance_mode():
    with pytest.raises(ValueError):
        ComparatorConfig(tolerance_mode="fuzzy")


def test_error_taxonomy():
    expected = [
        'unknown_option',
        'unfiltered_option',
        'ambiguous_options',
        'invalid_name',
        'invalid_contract',
        'unexported_field',
        'non_deterministic_function',
    ]
    assert ComparisonErrorTaxonomy.all_categories() == expected
    for code in expected:
        info = ComparisonErrorTaxonomy.classify(code)
        assert 'severity' in info
        assert 'pattern' in info
    assert ComparisonErrorTaxonomy.severity_level('unexported_field') == 'critical'
    assert ComparisonErrorTaxonomy.severity_level('nope') == 'unknown'


def test_classify_raised_error():
    with pytest.raises(UnfilteredOptionError) as excinfo:
        equal(1, 1, ignore())
    info = ComparisonErrorTaxonomy.classify_error(excinfo.value)
    assert info['code'] == 'unfiltered_option'
    assert info['class'] == 'configuration'
    assert 'cannot use an unfiltered option' in info['message']
