"""
Comparison Error Taxonomy

Classify comparison failures for reporting (API error payloads, CI output).

Every error code maps to:
- severity: 'critical' | 'high' | 'medium'
- pattern: What went wrong technically
- example: Typical trigger
- remedy: How to fix the rule set or the compared values
"""

from .errors import ComparisonError


class ComparisonErrorTaxonomy:
    """Map comparison error codes to reportable categories."""

    CATEGORIES = {
        'unknown_option': {
            'class': 'configuration',
            'severity': 'high',
            'pattern': 'Rule argument is not a rule value',
            'example': 'Passing a plain function instead of comparer(fn)',
            'remedy': 'Wrap functions with comparer/transformer/filter_* constructors'
        },
        'unfiltered_option': {
            'class': 'configuration',
            'severity': 'high',
            'pattern': 'Bare rule matches every value',
            'example': 'equal(x, y, ignore()) or a comparer with an unannotated parameter',
            'remedy': 'Scope the rule with filter_path/filter_values or annotate its parameter type'
        },
        'ambiguous_options': {
            'class': 'configuration',
            'severity': 'high',
            'pattern': 'Several type-matched rules disagree at one node',
            'example': 'A comparer and a transformer both declared for int',
            'remedy': 'Scope one of the rules with a filter; the first scoped match wins'
        },
        'invalid_name': {
            'class': 'configuration',
            'severity': 'medium',
            'pattern': 'Transformer name is not an identifier',
            'example': 'transformer("2x", fn) or transformer("_", fn)',
            'remedy': 'Use letters, digits and underscores, not starting with a digit'
        },
        'invalid_contract': {
            'class': 'configuration',
            'severity': 'medium',
            'pattern': 'JSON comparison contract cannot be compiled',
            'example': 'Rule of unknown type, or approx rule without tolerance',
            'remedy': 'Fix the contract rule listed in the message'
        },
        'unexported_field': {
            'class': 'invariant',
            'severity': 'critical',
            'pattern': 'Non-public field reached for a type outside the allowlist',
            'example': 'Dataclass with a _cache field compared without allow_unexported',
            'remedy': 'Add the type to allow_unexported, or ignore the field explicitly'
        },
        'non_deterministic_function': {
            'class': 'invariant',
            'severity': 'critical',
            'pattern': 'Comparer or predicate is not deterministic or not symmetric',
            'example': 'Comparer that uses random(), or f(x, y) != f(y, x)',
            'remedy': 'Make the function pure and symmetric in its two arguments'
        }
    }

    @classmethod
    def classify(cls, error_code: str) -> dict:
        """
        Retrieve category info for an error code.

        Args:
            error_code: One of the category keys (ComparisonError.code)

        Returns:
            Dict with class, severity, pattern, example, remedy
        """
        if error_code in cls.CATEGORIES:
            return cls.CATEGORIES[error_code]
        return {
            'class': 'unknown',
            'severity': 'unknown',
            'pattern': 'Unknown error category',
            'example': '',
            'remedy': 'See logs for details'
        }

    @classmethod
    def classify_error(cls, error: ComparisonError) -> dict:
        """Category info plus code, message and path for a raised error."""
        info = dict(cls.classify(error.code))
        info['code'] = error.code
        info['message'] = str(error)
        if error.path is not None:
            info['path'] = error.path
        return info

    @classmethod
    def all_categories(cls) -> list:
        """Return list of all error category names."""
        return list(cls.CATEGORIES.keys())

    @classmethod
    def severity_level(cls, error_code: str) -> str:
        """Get severity of an error category."""
        return cls.classify(error_code).get('severity', 'unknown')
