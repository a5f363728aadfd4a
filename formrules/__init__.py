"""formrules: declarative, data-driven validation of nested objects.

formrules validates an arbitrary nested object against a tree of field rules
and reports, per field, whether it is unevaluated, valid, or failed with a
message, plus an overall validity flag. It provides:
- Rule trees built from RuleNode objects or plain dicts
- Optional fields, custom emptiness tests and conditional skipping
- Ordered test chains with stop-on-failure / stop-on-success policies
- Fan-out of nested rules over array elements
- Layered failure messages (rule, validator instance, defaults)
- Atomic publication of results into a caller-owned state object

Basic usage:
    >>> from formrules import ObjectValidator, create_validation_state_for_fields
    >>> validator = ObjectValidator([{"name": "name"}])
    >>> state = create_validation_state_for_fields(["name"])
    >>> validator.validate_sync({"name": ""}, state)
    False
    >>> state.to_dict()["fields"]
    {'name': 'empty-mandatory-field'}
"""

__version__ = "0.1.0"
__author__ = "formrules Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formrules.errors import FormRulesError, InvalidPathError, RuleDefinitionError
from formrules.messages import (
    DEFAULT_EMPTY_MANDATORY_FIELD_ERROR,
    DEFAULT_FAILED_FIELD_ERROR,
    MessageDefaults,
    reset_default_messages,
)
from formrules.state import create_validation_state_for_fields
from formrules.types import (
    UNEVALUATED,
    VALID,
    ComputedMessage,
    Context,
    Invalid,
    LiteralMessage,
    RuleNode,
    StopPolicy,
    TestSpec,
    Unevaluated,
    Valid,
    ValidationState,
)
from formrules.validator import ObjectValidator

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "ObjectValidator",
    "RuleNode",
    "TestSpec",
    "StopPolicy",
    "Context",
    "LiteralMessage",
    "ComputedMessage",
    "Unevaluated",
    "Valid",
    "Invalid",
    "UNEVALUATED",
    "VALID",
    "ValidationState",
    "create_validation_state_for_fields",
    "MessageDefaults",
    "reset_default_messages",
    "DEFAULT_EMPTY_MANDATORY_FIELD_ERROR",
    "DEFAULT_FAILED_FIELD_ERROR",
    "FormRulesError",
    "RuleDefinitionError",
    "InvalidPathError",
]
