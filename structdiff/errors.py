"""
Comparison errors.

Two families, both fatal for the call that raised them:
- ConfigurationError: the rule set is unusable (raised before or during traversal)
- InvariantViolation: traversal met something the rules do not permit
"""

from typing import Optional


class ComparisonError(Exception):
    """Base class for every error raised by a comparison."""

    code = "comparison_error"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(ComparisonError):
    code = "configuration_error"


class UnknownOptionError(ConfigurationError):
    """A rule argument is not a recognized rule."""
    code = "unknown_option"


class UnfilteredOptionError(ConfigurationError):
    """A bare rule would apply to every value."""
    code = "unfiltered_option"


class AmbiguousOptionError(ConfigurationError):
    """Several type-matched rules disagree at one node."""
    code = "ambiguous_options"


class InvalidNameError(ConfigurationError, ValueError):
    """Transformer name is not an identifier."""
    code = "invalid_name"


class ContractError(ConfigurationError, ValueError):
    """A JSON comparison contract cannot be compiled into rules."""
    code = "invalid_contract"


class InvariantViolation(ComparisonError):
    code = "invariant_violation"


class UnexportedFieldError(InvariantViolation):
    """A non-public field was reached for a type outside the allowlist."""
    code = "unexported_field"


class NonDeterministicFunctionError(InvariantViolation):
    """A comparer or predicate gave different answers for the same pair."""
    code = "non_deterministic_function"
