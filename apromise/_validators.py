"""Runtime validators for promise and scheduler arguments."""

from __future__ import annotations

import math


def _type_name(value: object) -> str:
    return type(value).__name__


def ensure_callable(value: object, *, name: str) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {_type_name(value)}")


def ensure_optional_callable(value: object | None, *, name: str) -> None:
    if value is not None and not callable(value):
        raise TypeError(f"{name} must be callable or None, got {_type_name(value)}")


def coerce_finite(value: float, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {_type_name(value)}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return coerced


def coerce_delay(value: float, *, name: str) -> float:
    coerced = coerce_finite(value, name=name)
    if coerced < 0:
        raise ValueError(f"{name} must be non-negative, got {value!r}")
    return coerced


__all__ = [
    "coerce_delay",
    "coerce_finite",
    "ensure_callable",
    "ensure_optional_callable",
]
