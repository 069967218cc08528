"""Layered merge of configuration dicts.

Later layers win. Nested dicts merge key by key, anything else (lists
included) is replaced, and ``None`` leaves the lower layer's value alone.
"""

from __future__ import annotations

from typing import Any


def merge_layers(*layers: dict[str, Any] | None) -> dict[str, Any]:
    """Fold *layers* into a new dict, lowest priority first."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer:
            _merge_into(merged, layer)
    return merged


def _merge_into(target: dict[str, Any], layer: dict[str, Any]) -> None:
    for key, value in layer.items():
        if value is None:
            continue
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            nested = dict(current)
            _merge_into(nested, value)
            target[key] = nested
        elif isinstance(value, dict):
            nested = {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = value
