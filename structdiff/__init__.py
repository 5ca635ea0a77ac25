# Structural Diff Kit
# Compare arbitrary values structurally under composable rules
# and report path-annotated differences

from .compare import diff, equal, report
from .options import (
    RuleSet, allow_unexported, comparer, filter_path, filter_values,
    ignore, ignore_unexported, transformer,
)
from .path import (
    Indirect, MapIndex, Path, PathStep, Root, SliceIndex, StructField,
    Transform, TypeAssertion,
)
from .report import DiffReporter, ReportRecord
from .errors import (
    AmbiguousOptionError, ComparisonError, ConfigurationError, ContractError,
    InvalidNameError, InvariantViolation, NonDeterministicFunctionError,
    UnexportedFieldError, UnfilteredOptionError, UnknownOptionError,
)
from .error_taxonomy import ComparisonErrorTaxonomy
from .comparator_config import ComparatorConfig
from .contract import compile_contract

__all__ = [
    'equal', 'diff', 'report',
    'RuleSet', 'ignore', 'comparer', 'transformer', 'filter_path', 'filter_values',
    'allow_unexported', 'ignore_unexported',
    'Path', 'PathStep', 'Root', 'StructField', 'SliceIndex', 'MapIndex',
    'Indirect', 'TypeAssertion', 'Transform',
    'DiffReporter', 'ReportRecord',
    'ComparisonError', 'ConfigurationError', 'InvariantViolation',
    'UnknownOptionError', 'UnfilteredOptionError', 'AmbiguousOptionError',
    'InvalidNameError', 'ContractError', 'UnexportedFieldError',
    'NonDeterministicFunctionError',
    'ComparisonErrorTaxonomy', 'ComparatorConfig', 'compile_contract',
]
__version__ = '1.0.0'
