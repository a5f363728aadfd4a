"""Message resolution and default error messages.

Failure messages come from three layers, consulted at resolution time so a
change of defaults between two ``validate`` calls is always honored:

1. The rule itself: a field's ``empty_field_message``, a test's ``message``,
   or the string returned by a test function.
2. The validator instance overrides (``MessageRegistry.mandatory_field_error``
   and ``MessageRegistry.failed_field_error``). ``None`` means not overridden.
3. The validator's ``MessageDefaults``: either an explicit value given at
   construction, or the process-wide defaults managed by this module.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from formrules.types import (
    ComputedMessage,
    Context,
    LiteralMessage,
    MessageLike,
    MessageSpec,
    RuleNode,
    TestSpec,
    as_message,
)

DEFAULT_EMPTY_MANDATORY_FIELD_ERROR = "empty-mandatory-field"
DEFAULT_FAILED_FIELD_ERROR = "field-validation-failed"


def resolve_message(spec: MessageLike, context: Context) -> str:
    """Turn a message specification into its text.

    Examples:
        >>> ctx = Context(current_field_name="name", source={})
        >>> resolve_message("Required", ctx)
        'Required'
        >>> resolve_message(lambda c: f"{c.current_field_name} is bad", ctx)
        'name is bad'
    """
    spec = as_message(spec)
    if isinstance(spec, ComputedMessage):
        return spec.fn(context)
    return spec.text


def _raw(spec: MessageSpec) -> Any:
    return spec.text if isinstance(spec, LiteralMessage) else spec.fn


@dataclass(frozen=True)
class MessageDefaults:
    """Default texts for the two message axes.

    Attributes:
        mandatory_field_error: Used when a mandatory field is empty
        failed_field_error: Used when a test fails without a message of its own

    Examples:
        >>> defaults = MessageDefaults(mandatory_field_error="Required")
        >>> defaults.mandatory_field_error
        LiteralMessage(text='Required')
        >>> defaults.failed_field_error
        LiteralMessage(text='field-validation-failed')
    """
    mandatory_field_error: MessageSpec = LiteralMessage(DEFAULT_EMPTY_MANDATORY_FIELD_ERROR)
    failed_field_error: MessageSpec = LiteralMessage(DEFAULT_FAILED_FIELD_ERROR)

    def __post_init__(self):
        object.__setattr__(self, "mandatory_field_error", as_message(self.mandatory_field_error))
        object.__setattr__(self, "failed_field_error", as_message(self.failed_field_error))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict; computed messages are returned as their callables."""
        return {
            "mandatoryFieldError": _raw(self.mandatory_field_error),
            "failedFieldError": _raw(self.failed_field_error),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MessageDefaults":
        """Create MessageDefaults from dict; missing keys keep the built-in texts."""
        kwargs: Dict[str, Any] = {}
        if data.get("mandatoryFieldError") is not None:
            kwargs["mandatory_field_error"] = data["mandatoryFieldError"]
        if data.get("failedFieldError") is not None:
            kwargs["failed_field_error"] = data["failedFieldError"]
        return cls(**kwargs)


_process_defaults = MessageDefaults()


def get_default_messages() -> MessageDefaults:
    """Return the process-wide defaults."""
    return _process_defaults


def set_default_messages(defaults: MessageDefaults) -> None:
    """Replace the process-wide defaults."""
    global _process_defaults
    if not isinstance(defaults, MessageDefaults):
        raise TypeError(f"Expected MessageDefaults, got {type(defaults).__name__}")
    _process_defaults = defaults


def set_default_mandatory_field_error(message: MessageLike) -> None:
    """Set the process-wide message for empty mandatory fields.

    Affects every validator that was built without explicit defaults and has
    no instance override.
    """
    set_default_messages(replace(_process_defaults, mandatory_field_error=as_message(message)))


def set_default_failed_field_error(message: MessageLike) -> None:
    """Set the process-wide message for failed tests."""
    set_default_messages(replace(_process_defaults, failed_field_error=as_message(message)))


def reset_default_messages() -> None:
    """Restore the built-in process-wide defaults."""
    set_default_messages(MessageDefaults())


@dataclass
class MessageRegistry:
    """Per-validator message layers on top of the defaults.

    Attributes:
        defaults: Explicit defaults for this validator; None follows the
            process-wide defaults
        mandatory_field_error: Instance override for empty mandatory fields
        failed_field_error: Instance override for failed tests
    """
    defaults: Optional[MessageDefaults] = None
    mandatory_field_error: Optional[MessageSpec] = None
    failed_field_error: Optional[MessageSpec] = None

    @property
    def active_defaults(self) -> MessageDefaults:
        if self.defaults is not None:
            return self.defaults
        return get_default_messages()

    def clear_overrides(self) -> None:
        self.mandatory_field_error = None
        self.failed_field_error = None

    def mandatory_message(self, rule: RuleNode, context: Context) -> str:
        """Resolve the message for an empty mandatory ``rule``."""
        if rule.empty_field_message is not None:
            spec = rule.empty_field_message
        elif self.mandatory_field_error is not None:
            spec = self.mandatory_field_error
        else:
            spec = self.active_defaults.mandatory_field_error
        return resolve_message(spec, context)

    def failed_message(self, test: TestSpec, context: Context) -> str:
        """Resolve the message for a failed ``test`` that returned no text."""
        if test.message is not None:
            spec = test.message
        elif self.failed_field_error is not None:
            spec = self.failed_field_error
        else:
            spec = self.active_defaults.failed_field_error
        return resolve_message(spec, context)


__all__ = [
    "DEFAULT_EMPTY_MANDATORY_FIELD_ERROR",
    "DEFAULT_FAILED_FIELD_ERROR",
    "resolve_message",
    "MessageDefaults",
    "get_default_messages",
    "set_default_messages",
    "set_default_mandatory_field_error",
    "set_default_failed_field_error",
    "reset_default_messages",
    "MessageRegistry",
]
