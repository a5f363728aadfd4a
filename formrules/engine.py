"""Recursive rule evaluation engine.

The engine walks a tree of RuleNodes against a source object, depth-first and
strictly in list order:

1. Read the field value by dot-path and build its Context.
2. Decide emptiness with the rule's ``empty_test`` or the engine default.
3. Drop the rule when ``skip_if`` is true, or when it is optional and empty.
4. Report an empty mandatory field with its resolved mandatory message.
5. Otherwise mark the field valid, fan out into ``fields`` for every element
   of a sequence value, then run the test chain, honoring the
   stop-on-failure / stop-on-success policies.

Each call frame returns a FrameOutcome holding its validity, its results and
whether the sibling list was interrupted. Nothing is written to a caller's
ValidationState here; publishing the results is the validator's job.
"""

import inspect
import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from formrules.messages import MessageRegistry
from formrules.paths import get_path, is_sequence, join_path
from formrules.types import (
    VALID,
    Context,
    EmptyTest,
    FieldResult,
    Invalid,
    RuleNode,
    StopPolicy,
)

logger = logging.getLogger(__name__)


def default_empty_test(value: Any, context: Optional[Context] = None) -> bool:
    """Default emptiness predicate.

    Numbers, zero included, are never empty. Anything else is empty when it
    is None, False, or has a length of zero. ``bool`` is not treated as a
    number, so ``False`` is empty and ``True`` is not.

    Examples:
        >>> default_empty_test(0)
        False
        >>> default_empty_test("")
        True
        >>> default_empty_test([])
        True
        >>> default_empty_test(False)
        True
    """
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return False
    if value is None or value is False:
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


async def maybe_await(value: Any) -> Any:
    """Await value if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class FrameOutcome:
    """Result of evaluating one rule or one list of sibling rules.

    Attributes:
        valid: Whether everything evaluated in this frame passed
        results: Field results keyed by full dot-path, in write order
        stop_siblings: Whether the remaining siblings must be skipped
    """
    valid: bool
    results: Dict[str, FieldResult] = field(default_factory=dict)
    stop_siblings: bool = False


class ValidationEngine:
    """Evaluates rule trees into FrameOutcomes.

    Attributes:
        messages: Message layers used to resolve failure texts
        empty_test: Emptiness predicate for rules without their own
    """

    def __init__(self, messages: MessageRegistry, empty_test: EmptyTest = default_empty_test):
        self.messages = messages
        self.empty_test = empty_test

    async def evaluate(
        self,
        rules: Sequence[RuleNode],
        scope: Any,
        source: Any,
        context_data: Any = None,
        base_path: str = "",
    ) -> FrameOutcome:
        """Evaluate a list of sibling rules against ``scope``.

        Args:
            rules: Sibling rules, evaluated in order
            scope: Object the rule names are resolved against
            source: Root object of the whole run, exposed through Context
            context_data: Caller data shared with every predicate
            base_path: Dot-path prefix of every result written by this frame

        Returns:
            FrameOutcome whose ``stop_siblings`` tells whether the list was cut
            short. The interruption never reaches the caller's own siblings.
        """
        valid = True
        results: Dict[str, FieldResult] = {}
        for rule in rules:
            outcome = await self._evaluate_rule(rule, scope, source, context_data, base_path)
            if outcome is None:
                continue
            valid = outcome.valid and valid
            results.update(outcome.results)
            if outcome.stop_siblings:
                logger.debug("Rule '%s' stopped its sibling rules under '%s'", rule.name, base_path)
                return FrameOutcome(valid=valid, results=results, stop_siblings=True)
        return FrameOutcome(valid=valid, results=results)

    async def _evaluate_rule(
        self,
        rule: RuleNode,
        scope: Any,
        source: Any,
        context_data: Any,
        base_path: str,
    ) -> Optional[FrameOutcome]:
        """Evaluate a single rule; None means the rule was skipped."""
        value = get_path(scope, rule.name)
        context = Context(
            current_field_name=rule.name,
            source=source,
            context_data=context_data,
            scope=scope,
        )
        empty_test = rule.empty_test or self.empty_test
        is_empty = await maybe_await(empty_test(value, context))

        if rule.skip_if is not None and self._should_skip(rule, context):
            logger.debug("Skipping rule '%s' under '%s'", rule.name, base_path)
            return None
        if rule.is_optional and is_empty:
            return None

        path = join_path(base_path, rule.name)
        if is_empty:
            logger.debug("Mandatory field '%s' is empty", path)
            message = self.messages.mandatory_message(rule, context)
            return FrameOutcome(valid=False, results={path: Invalid(message)})

        valid = True
        # Overwritten below if a test fails
        results: Dict[str, FieldResult] = {path: VALID}

        if rule.fields is not None and is_sequence(value):
            logger.debug("Fanning out '%s' over %d elements", path, len(value))
            for index, item in enumerate(value):
                child = await self.evaluate(
                    rule.fields, item, source, context_data, f"{path}.{index}"
                )
                valid = child.valid and valid
                results.update(child.results)

        stop_siblings = False
        for test in rule.tests or ():
            result = await maybe_await(test.fn(value, context))
            if result is True:
                if rule.stop_on_success is not None:
                    stop_siblings = rule.stop_on_success is StopPolicy.FIELDS
                    break
                continue

            valid = False
            if isinstance(result, str):
                message = result
            else:
                message = self.messages.failed_message(test, context)
            results[path] = Invalid(message)
            if rule.stop_on_failure is not None:
                stop_siblings = rule.stop_on_failure is StopPolicy.FIELDS
                break

        return FrameOutcome(valid=valid, results=results, stop_siblings=stop_siblings)

    @staticmethod
    def _should_skip(rule: RuleNode, context: Context) -> bool:
        skip = rule.skip_if(context)
        if inspect.isawaitable(skip):
            if inspect.iscoroutine(skip):
                skip.close()
            raise TypeError(f"skip_if of rule '{rule.name}' must be synchronous")
        return bool(skip)


__all__ = [
    "default_empty_test",
    "maybe_await",
    "FrameOutcome",
    "ValidationEngine",
]
