"""
Environment-driven configuration for apromise.

Variables:
    APROMISE_DEBUG: when truthy ("1", "true", "yes"), every promise records
        the source location that created it and shows it in ``repr``.
    APROMISE_SCHEDULER: name of the scheduler created lazily as the process
        default ("manual" or "asyncio"; defaults to "manual").
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from apromise.errors import UnknownSchedulerError

SCHEDULER_CHOICES: tuple[str, ...] = ("manual", "asyncio")


def _truthy(raw: str | None) -> bool:
    return (raw or "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class PromiseConfig:
    scheduler: str = "manual"


def debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Whether ``APROMISE_DEBUG`` asks for creation-site capture."""
    env = os.environ if environ is None else environ
    return _truthy(env.get("APROMISE_DEBUG"))


def load_config(environ: Mapping[str, str] | None = None) -> PromiseConfig:
    env = os.environ if environ is None else environ
    scheduler = (env.get("APROMISE_SCHEDULER") or "manual").strip().lower()
    if scheduler not in SCHEDULER_CHOICES:
        raise UnknownSchedulerError(scheduler, SCHEDULER_CHOICES)
    return PromiseConfig(scheduler=scheduler)


# Read once at import; tests patch this attribute directly.
DEBUG_PROMISES = debug_enabled()


__all__ = [
    "DEBUG_PROMISES",
    "SCHEDULER_CHOICES",
    "PromiseConfig",
    "debug_enabled",
    "load_config",
]
