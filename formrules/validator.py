"""ObjectValidator, the public entry point of formrules.

An ObjectValidator owns one rule tree and can validate any number of source
objects against it. Every run updates a caller-owned ValidationState in place,
and only once the whole tree has been evaluated: if a predicate raises, the
exception propagates and the state keeps its previous contents.

Usage:
    >>> import anyio
    >>> from formrules import ObjectValidator, create_validation_state_for_fields
    >>> validator = ObjectValidator([
    ...     {"name": "name"},
    ...     {"name": "age", "tests": [{"fn": lambda v, ctx: v >= 18, "message": "Too young"}]},
    ... ])
    >>> state = create_validation_state_for_fields(["name", "age"])
    >>> anyio.run(validator.validate, {"name": "John", "age": 17}, state)
    False
    >>> state.failures()
    {'age': 'Too young'}
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import anyio

from formrules import messages
from formrules.engine import ValidationEngine, default_empty_test
from formrules.errors import RuleDefinitionError
from formrules.messages import MessageDefaults, MessageRegistry
from formrules.types import (
    UNEVALUATED,
    EmptyTest,
    FieldResult,
    MessageLike,
    RuleNode,
    ValidationState,
    as_message,
    coerce_rules,
)

logger = logging.getLogger(__name__)


class ObjectValidator:
    """Validates objects against a fixed tree of field rules.

    Attributes:
        rules: The root rule list, normalized to a tuple of RuleNodes

    Examples:
        >>> validator = ObjectValidator([RuleNode(name="email")])
        >>> validator.with_mandatory_field_error("Please fill in this field") is validator
        True
    """

    def __init__(
        self,
        rules: Iterable[Union[RuleNode, Mapping[str, Any]]],
        defaults: Optional[MessageDefaults] = None,
        empty_test: Optional[EmptyTest] = None,
    ) -> None:
        """Initialize the validator.

        Args:
            rules: RuleNodes, or dicts accepted by ``RuleNode.from_dict``
            defaults: Default messages for this validator. When omitted, the
                process-wide defaults are read at every resolution.
            empty_test: Emptiness predicate replacing ``default_empty_test``

        Raises:
            RuleDefinitionError: If the rule tree is invalid
        """
        self.rules = coerce_rules(rules)
        self._messages = MessageRegistry(defaults=defaults)
        self._engine = ValidationEngine(self._messages)
        if empty_test is not None:
            self.with_empty_field_test(empty_test)

    def with_mandatory_field_error(self, message: MessageLike) -> "ObjectValidator":
        """Override the empty mandatory field message for this validator."""
        self._messages.mandatory_field_error = as_message(message)
        return self

    def with_failed_field_default_error(self, message: MessageLike) -> "ObjectValidator":
        """Override the failed test message for this validator."""
        self._messages.failed_field_error = as_message(message)
        return self

    def with_empty_field_test(self, fn: EmptyTest) -> "ObjectValidator":
        """Replace the emptiness predicate used by rules without their own.

        ``fn(value, context)`` returns True when the value is empty and may
        be a coroutine function.
        """
        if not callable(fn):
            raise RuleDefinitionError("empty field test must be callable")
        self._engine.empty_test = fn
        return self

    def clear_overrides(self) -> "ObjectValidator":
        """Drop instance message overrides and restore the default empty test."""
        self._messages.clear_overrides()
        self._engine.empty_test = default_empty_test
        return self

    @staticmethod
    def set_default_mandatory_field_error(message: MessageLike) -> None:
        """Set the process-wide empty mandatory field message."""
        messages.set_default_mandatory_field_error(message)

    @staticmethod
    def set_default_failed_field_error(message: MessageLike) -> None:
        """Set the process-wide failed test message."""
        messages.set_default_failed_field_error(message)

    async def validate(
        self,
        source: Any,
        state: ValidationState,
        context_data: Any = None,
    ) -> bool:
        """Validate ``source`` and publish the results into ``state``.

        Every path already present in ``state.fields`` is reset to
        Unevaluated, then overwritten by the results of this run.

        Args:
            source: The object to validate
            state: Caller-owned state, updated in place
            context_data: Auxiliary data exposed to predicates as
                ``context.context_data``

        Returns:
            The overall validity, also stored in ``state.is_valid``
        """
        results: Dict[str, FieldResult] = {path: UNEVALUATED for path in state.fields}
        outcome = await self._engine.evaluate(self.rules, source, source, context_data)
        results.update(outcome.results)

        state.fields.update(results)
        state.is_valid = outcome.valid
        logger.debug(
            "Validation finished: valid=%s, %d field results", outcome.valid, len(outcome.results)
        )
        return outcome.valid

    def validate_sync(
        self,
        source: Any,
        state: ValidationState,
        context_data: Any = None,
    ) -> bool:
        """Blocking variant of ``validate``; must not run inside an event loop."""
        return anyio.run(self.validate, source, state, context_data)


__all__ = [
    "ObjectValidator",
]
