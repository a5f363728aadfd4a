"""Exception types for formrules.

Validation failures are never raised: they are reported as ``Invalid`` field
results on a ``ValidationState``. The exceptions in this module cover the two
ways a caller can break the library's contract:

- ``RuleDefinitionError``: a rule tree was built from bad configuration
  (empty field name, unknown stop policy, non-callable predicate, ...).
  Raised eagerly when the ``RuleNode`` / ``TestSpec`` is constructed.
- ``InvalidPathError``: a dot-path given to the path accessor is not a string,
  or cannot be written to.

Exceptions raised by caller-supplied predicates are not wrapped; they
propagate out of ``ObjectValidator.validate`` unchanged.
"""

from typing import Any, Optional


class FormRulesError(Exception):
    """Base class for every exception raised by formrules itself."""


class RuleDefinitionError(FormRulesError, ValueError):
    """Raised when a rule tree is built from invalid configuration.

    Attributes:
        field_name: Name of the offending rule, if known
        message: Human-readable description of the problem

    Examples:
        >>> err = RuleDefinitionError("unknown stop policy 'all'", field_name="age")
        >>> err.field_name
        'age'
        >>> str(err)
        "Rule 'age': unknown stop policy 'all'"
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        self.message = message
        if field_name:
            message = f"Rule '{field_name}': {message}"
        super().__init__(message)


class InvalidPathError(FormRulesError, ValueError):
    """Raised when a dot-path cannot be used.

    Attributes:
        path: The rejected path value
    """

    def __init__(self, path: Any, reason: Optional[str] = None):
        self.path = path
        if reason is None:
            reason = f"path must be a string, got {type(path).__name__}"
        super().__init__(f"Invalid path {path!r}: {reason}")


__all__ = [
    "FormRulesError",
    "RuleDefinitionError",
    "InvalidPathError",
]
