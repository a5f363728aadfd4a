"""Helpers for building ValidationState objects."""

from typing import Iterable

from formrules.types import UNEVALUATED, ValidationState


def create_validation_state_for_fields(names: Iterable[str]) -> ValidationState:
    """Create an invalid state with every name mapped to Unevaluated.

    Examples:
        >>> state = create_validation_state_for_fields(["name", "age"])
        >>> state.is_valid
        False
        >>> state.to_dict()["fields"]
        {'name': False, 'age': False}
    """
    return ValidationState(is_valid=False, fields={name: UNEVALUATED for name in names})


__all__ = [
    "create_validation_state_for_fields",
]
