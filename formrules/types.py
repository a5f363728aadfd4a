"""Core type definitions for formrules.

This module defines the data model shared by the engine and the validator:
- StopPolicy: how far a stop-on-failure / stop-on-success interruption reaches
- Context: immutable per-field snapshot handed to predicates and messages
- LiteralMessage / ComputedMessage: the two kinds of message specification
- Unevaluated / Valid / Invalid: the three possible results of a field
- TestSpec and RuleNode: the declarative rule tree
- ValidationState: the caller-owned, per-record result object

Rule trees are pure configuration. They are validated and normalized when
constructed and never mutated afterwards, so one tree can be shared by any
number of validation runs.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Union

from typing_extensions import TypeAlias

from formrules.errors import RuleDefinitionError
from formrules.paths import get_path, set_path, split_path


class StopPolicy(str, Enum):
    """Reach of a stop-on-failure / stop-on-success interruption.

    TESTS stops the remaining tests of the field. FIELDS additionally stops
    the remaining sibling rules at the same nesting level.
    """
    TESTS = "tests"
    FIELDS = "fields"


@dataclass(frozen=True)
class Context:
    """Snapshot of the field being validated, passed to predicates and messages.

    Attributes:
        current_field_name: The rule's own name (never the full dotted path)
        source: The root object given to ``validate``
        context_data: Caller-supplied auxiliary data, shared read-only
        scope: The object ``current_field_name`` is resolved against. Equal to
            ``source`` at top level and to the array element inside a fan-out.

    Examples:
        >>> ctx = Context(current_field_name="age", source={"age": 17})
        >>> ctx.current_field_name
        'age'
    """
    current_field_name: str
    source: Any
    context_data: Any = None
    scope: Any = None


@dataclass(frozen=True)
class LiteralMessage:
    """A fixed message text."""
    text: str


@dataclass(frozen=True)
class ComputedMessage:
    """A message computed from the field's Context at resolution time."""
    fn: Callable[[Context], str]


MessageSpec: TypeAlias = Union[LiteralMessage, ComputedMessage]
MessageLike: TypeAlias = Union[str, Callable[[Context], str], LiteralMessage, ComputedMessage]

TestResult: TypeAlias = Union[bool, str]
TestFn: TypeAlias = Callable[[Any, Context], Union[TestResult, Awaitable[TestResult]]]
EmptyTest: TypeAlias = Callable[[Any, Context], Union[bool, Awaitable[bool]]]
SkipPredicate: TypeAlias = Callable[[Context], bool]


def as_message(spec: MessageLike, field_name: Optional[str] = None) -> MessageSpec:
    """Normalize a plain string or callable into a MessageSpec.

    Raises:
        RuleDefinitionError: If spec is neither a string nor callable
    """
    if isinstance(spec, (LiteralMessage, ComputedMessage)):
        return spec
    if isinstance(spec, str):
        return LiteralMessage(spec)
    if callable(spec):
        return ComputedMessage(spec)
    raise RuleDefinitionError(
        f"message must be a string or a callable, got {type(spec).__name__}",
        field_name=field_name,
    )


class FieldResult(ABC):
    """Base class of the three field result variants."""

    __slots__ = ()

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def is_evaluated(self) -> bool:
        return True

    @abstractmethod
    def to_value(self) -> TestResult:
        """Render the boundary form: False, True or the failure message."""


@dataclass(frozen=True)
class Unevaluated(FieldResult):
    """No verdict yet for this field."""

    @property
    def is_evaluated(self) -> bool:
        return False

    def to_value(self) -> TestResult:
        return False


@dataclass(frozen=True)
class Valid(FieldResult):
    """The field passed."""

    @property
    def is_valid(self) -> bool:
        return True

    def to_value(self) -> TestResult:
        return True


@dataclass(frozen=True)
class Invalid(FieldResult):
    """The field failed with ``message``."""
    message: str

    def to_value(self) -> TestResult:
        return self.message


UNEVALUATED = Unevaluated()
VALID = Valid()


def field_result_from_value(value: Any) -> FieldResult:
    """Convert a boundary value (False / True / message) into a FieldResult.

    Examples:
        >>> field_result_from_value("Bread not available")
        Invalid(message='Bread not available')
        >>> field_result_from_value(True) is VALID
        True
    """
    if isinstance(value, FieldResult):
        return value
    if value is True:
        return VALID
    if value is False or value is None:
        return UNEVALUATED
    if isinstance(value, str):
        return Invalid(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a field result")


def _check_callable(value: Any, what: str, field_name: Optional[str]) -> None:
    if value is not None and not callable(value):
        raise RuleDefinitionError(f"{what} must be callable", field_name=field_name)


def _rename_keys(data: Mapping, keys: Dict[str, str], what: str, field_name: Optional[str]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in keys:
            raise RuleDefinitionError(f"unknown {what} key {key!r}", field_name=field_name)
        kwargs[keys[key]] = value
    return kwargs


_TEST_KEYS = {"fn": "fn", "message": "message"}

_RULE_KEYS = {
    "name": "name",
    "isOptional": "is_optional",
    "is_optional": "is_optional",
    "tests": "tests",
    "fields": "fields",
    "emptyTest": "empty_test",
    "empty_test": "empty_test",
    "emptyFieldMessage": "empty_field_message",
    "empty_field_message": "empty_field_message",
    "skipIf": "skip_if",
    "skip_if": "skip_if",
    "stopOnFailure": "stop_on_failure",
    "stop_on_failure": "stop_on_failure",
    "stopOnSuccess": "stop_on_success",
    "stop_on_success": "stop_on_success",
}


@dataclass(frozen=True)
class TestSpec:
    """One predicate in a field's test chain.

    ``fn(value, context)`` returns True when the value passes. Any other
    return value is a failure; a returned string is used verbatim as the
    failure message. ``fn`` may be a coroutine function.

    Attributes:
        fn: The predicate
        message: Optional failure message used when fn returns a non-string

    Examples:
        >>> spec = TestSpec(fn=lambda value, ctx: value > 0, message="Must be positive")
        >>> spec.message
        LiteralMessage(text='Must be positive')
    """
    __test__ = False

    fn: TestFn
    message: Optional[MessageSpec] = None

    def __post_init__(self):
        """Validate the predicate and normalize the message."""
        if not callable(self.fn):
            raise RuleDefinitionError("test fn must be callable")
        if self.message is not None:
            object.__setattr__(self, "message", as_message(self.message))

    @classmethod
    def from_dict(cls, data: Mapping) -> "TestSpec":
        """Create TestSpec from dict with ``fn`` and optional ``message`` keys."""
        kwargs = _rename_keys(data, _TEST_KEYS, "test", None)
        if "fn" not in kwargs:
            raise RuleDefinitionError("test is missing 'fn'")
        return cls(**kwargs)


@dataclass(frozen=True)
class RuleNode:
    """A declarative rule for one field, possibly with nested rules.

    Attributes:
        name: Dot-path of the field, relative to the parent's matched value
        is_optional: An optional field that is empty is skipped silently
        tests: Ordered test chain
        fields: Rules applied to each element when the value is a sequence
        empty_test: Overrides the validator's emptiness predicate
        empty_field_message: Message used when a mandatory field is empty
        skip_if: Synchronous predicate; when true the rule is ignored entirely
        stop_on_failure: Stop policy applied when a test fails
        stop_on_success: Stop policy applied when a test passes

    Lists given for ``tests`` and ``fields`` are stored as tuples, dict entries
    are converted with ``TestSpec.from_dict`` / ``RuleNode.from_dict``, plain
    strings and callables given as messages become MessageSpecs, and the
    strings ``"tests"`` / ``"fields"`` become StopPolicy members.

    Examples:
        >>> rule = RuleNode(
        ...     name="age",
        ...     tests=[TestSpec(fn=lambda value, ctx: value >= 18, message="Too young")],
        ...     stop_on_failure="fields",
        ... )
        >>> rule.stop_on_failure
        <StopPolicy.FIELDS: 'fields'>
    """
    name: str
    is_optional: bool = False
    tests: Optional[Tuple[TestSpec, ...]] = None
    fields: Optional[Tuple["RuleNode", ...]] = None
    empty_test: Optional[EmptyTest] = None
    empty_field_message: Optional[MessageSpec] = None
    skip_if: Optional[SkipPredicate] = None
    stop_on_failure: Optional[StopPolicy] = None
    stop_on_success: Optional[StopPolicy] = None

    def __post_init__(self):
        """Validate and normalize the rule configuration."""
        if not isinstance(self.name, str) or not split_path(self.name):
            raise RuleDefinitionError(f"rule name must be a non-empty dot-path, got {self.name!r}")

        if self.tests is not None:
            object.__setattr__(self, "tests", tuple(self._coerce_test(t) for t in self.tests))
        if self.fields is not None:
            object.__setattr__(self, "fields", tuple(coerce_rule(f) for f in self.fields))

        _check_callable(self.empty_test, "empty_test", self.name)
        _check_callable(self.skip_if, "skip_if", self.name)

        if self.empty_field_message is not None:
            object.__setattr__(
                self, "empty_field_message", as_message(self.empty_field_message, self.name)
            )

        for attr in ("stop_on_failure", "stop_on_success"):
            policy = getattr(self, attr)
            if policy is None or isinstance(policy, StopPolicy):
                continue
            try:
                object.__setattr__(self, attr, StopPolicy(policy))
            except ValueError:
                raise RuleDefinitionError(
                    f"unknown {attr} policy {policy!r}, expected one of "
                    f"{[p.value for p in StopPolicy]}",
                    field_name=self.name,
                ) from None

    def _coerce_test(self, test: Any) -> TestSpec:
        if isinstance(test, TestSpec):
            return test
        if isinstance(test, Mapping):
            try:
                return TestSpec.from_dict(test)
            except RuleDefinitionError as exc:
                raise RuleDefinitionError(exc.message, field_name=self.name) from None
        raise RuleDefinitionError(
            f"tests must be TestSpec or dict entries, got {type(test).__name__}",
            field_name=self.name,
        )

    @classmethod
    def from_dict(cls, data: Mapping) -> "RuleNode":
        """Create RuleNode from dict.

        Accepts camelCase keys (``isOptional``, ``emptyTest``,
        ``emptyFieldMessage``, ``skipIf``, ``stopOnFailure``,
        ``stopOnSuccess``) as well as their snake_case attribute names.
        Nested ``tests`` and ``fields`` entries may be dicts themselves.

        Examples:
            >>> rule = RuleNode.from_dict({"name": "email", "isOptional": True})
            >>> rule.is_optional
            True
        """
        kwargs = _rename_keys(data, _RULE_KEYS, "rule", data.get("name"))
        if "name" not in kwargs:
            raise RuleDefinitionError("rule is missing 'name'")
        return cls(**kwargs)


def coerce_rule(rule: Union[RuleNode, Mapping]) -> RuleNode:
    """Return rule as a RuleNode, building it from a dict if needed."""
    if isinstance(rule, RuleNode):
        return rule
    if isinstance(rule, Mapping):
        return RuleNode.from_dict(rule)
    raise RuleDefinitionError(f"rules must be RuleNode or dict entries, got {type(rule).__name__}")


def coerce_rules(rules: Iterable[Union[RuleNode, Mapping]]) -> Tuple[RuleNode, ...]:
    """Return a tuple of RuleNodes built from RuleNode or dict entries."""
    if isinstance(rules, (RuleNode, Mapping, str)):
        raise RuleDefinitionError("rules must be a list of rule entries")
    return tuple(coerce_rule(rule) for rule in rules)


@dataclass
class ValidationState:
    """Caller-owned validation result for one form or record.

    The state is created once (see ``create_validation_state_for_fields``)
    and updated in place by every ``ObjectValidator.validate`` call.

    Attributes:
        is_valid: Overall validity of the last run
        fields: Field results keyed by full dot-path, array indices included
    """
    is_valid: bool = False
    fields: Dict[str, FieldResult] = field(default_factory=dict)

    def __post_init__(self):
        """Convert boundary values (False / True / message) into FieldResults.

        The ``fields`` dict is updated in place, so a caller keeping a
        reference to it sees the converted results.
        """
        for path, value in list(self.fields.items()):
            self.fields[path] = field_result_from_value(value)

    def _results(self) -> Dict[str, FieldResult]:
        return {path: field_result_from_value(value) for path, value in self.fields.items()}

    def failures(self) -> Dict[str, str]:
        """Return ``{path: message}`` for every failed field."""
        return {
            path: result.message
            for path, result in self._results().items()
            if isinstance(result, Invalid)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict with tri-state field values (False / True / message)."""
        return {
            "isValid": self.is_valid,
            "fields": {path: result.to_value() for path, result in self._results().items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ValidationState":
        """Create ValidationState from dict with tri-state field values."""
        return cls(
            is_valid=bool(data.get("isValid", False)),
            fields={
                path: field_result_from_value(value)
                for path, value in data.get("fields", {}).items()
            },
        )

    def to_tree(self) -> Dict[str, Any]:
        """Expand the flat field results into a nested structure.

        The tree mirrors the shape of the validated source, e.g.
        ``{"subs.1.bread": VALID}`` becomes ``{"subs": [None, {"bread": True}]}``.
        A path that also has nested results (an array field with ``fields``)
        is represented by its nested container, unless the path itself
        failed: a failure message replaces the container, so it is never
        hidden by nested entries. The nested results stay available in
        ``fields``.
        """
        results = self._results()
        tree: Dict[str, Any] = {}
        deepest_first = sorted(results, key=lambda p: len(split_path(p)), reverse=True)
        for path in deepest_first:
            result = results[path]
            if isinstance(get_path(tree, path), (dict, list)) and not isinstance(result, Invalid):
                continue
            set_path(tree, path, result.to_value())
        return tree


__all__ = [
    "StopPolicy",
    "Context",
    "LiteralMessage",
    "ComputedMessage",
    "MessageSpec",
    "MessageLike",
    "TestResult",
    "TestFn",
    "EmptyTest",
    "SkipPredicate",
    "as_message",
    "FieldResult",
    "Unevaluated",
    "Valid",
    "Invalid",
    "UNEVALUATED",
    "VALID",
    "field_result_from_value",
    "TestSpec",
    "RuleNode",
    "coerce_rule",
    "coerce_rules",
    "ValidationState",
]
