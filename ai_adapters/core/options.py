"""Layered merging of request options.

Options are resolved in three layers: the adapter's hard-coded default, the
default configured on the adapter instance, then the per-call override. A
field set (non-``None``) in a later layer wins; unset fields fall through to
the earlier layer. Merging always returns a new object and never mutates its
inputs.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel

OptionsT = TypeVar("OptionsT", bound=BaseModel)


def set_fields(options: BaseModel) -> dict[str, object]:
    """Return the fields of ``options`` that carry a value."""
    return {
        name: value
        for name in type(options).model_fields
        if (value := getattr(options, name)) is not None
    }


def merge_options(base: OptionsT | None, override: OptionsT | None) -> OptionsT | None:
    """Merge ``override`` on top of ``base`` field by field.

    Raises:
        TypeError: If both layers are given but are different options types.
    """
    if override is None:
        return base
    if base is None:
        return override
    if not isinstance(override, type(base)):
        msg = (
            f"Cannot merge {type(override).__name__} into {type(base).__name__}: "
            "options layers must share a type"
        )
        raise TypeError(msg)

    updates = set_fields(override)
    if not updates:
        return base
    return base.model_copy(update=updates)


def merge_layers(*layers: OptionsT | None) -> OptionsT | None:
    """Fold :func:`merge_options` over ``layers`` from least to most specific."""
    merged: OptionsT | None = None
    for layer in layers:
        merged = merge_options(merged, layer)
    return merged
