"""
--------------------
Enumeration Config
--------------------
"""
from enum import Enum, auto
from typing import Optional

import attr

from .exceptions import ConfigurationError


class SiblingOrder(Enum):
    """
    Specifies in which order the alternatives of a single `sample` call are explored.
    """
    REVERSED = auto()
    """The worklist is a plain LIFO stack, the last support value is explored first."""
    DECLARED = auto()
    """Siblings are explored in the order in which the distribution declares its support."""


def _check_max_paths(_instance, _attribute, value: Optional[int]):
    if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
        raise ConfigurationError(f"max_paths must be a positive integer or None, got {value!r}")


def _check_sibling_order(_instance, _attribute, value):
    if not isinstance(value, SiblingOrder):
        raise ConfigurationError(f"sibling_order must be a SiblingOrder, got {value!r}")


@attr.s(frozen=True)
class EnumerationConfig:
    """Global configurable options for exhaustive enumeration."""

    max_paths: Optional[int] = attr.ib(default=None, validator=_check_max_paths)
    """Ceiling on the number of completed execution paths. `None` means unbounded."""

    prune_impossible: bool = attr.ib(default=False)
    """Abandon a path as soon as its weight collapses to `-inf` instead of running it to completion."""

    keep_impossible: bool = attr.ib(default=True)
    """Report outcomes with weight `-inf` in the result of `explore`."""

    sibling_order: SiblingOrder = attr.ib(default=SiblingOrder.REVERSED, validator=_check_sibling_order)
    """Selects the exploration order of sibling branches."""

    show_intermediate_steps: bool = attr.ib(default=False)
    """Enables the printing of every outcome as soon as it is recorded."""
