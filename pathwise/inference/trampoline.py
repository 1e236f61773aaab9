"""
----------
Trampoline
----------

The trampoline owns the worklist of suspended branches of one exploration.

Every `sample` call is a branching point of an implicit execution tree. One alternative is continued right away on
the host call stack, all remaining alternatives are suspended as :class:`PendingBranch` objects on the worklist.
Once a path reaches its end, the driver pops the most recently pushed branch and resumes it. Breadth across the
execution tree therefore lives on the heap, and the host stack only ever holds a single path.
"""
from __future__ import annotations

import contextlib
import contextvars
import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterator, List, Optional, Sequence

from pathwise.inference.config import EnumerationConfig, SiblingOrder
from pathwise.inference.exceptions import (BudgetExceeded, ContinuationReuseError, DroppedContinuation,
                                           NoActiveExploration)
from pathwise.util.logger import log_setup

logger = log_setup(str(__name__).rsplit(".")[-1], logging.DEBUG)

Continuation = Callable[[Any], None]
"""The rest of a computation: takes exactly one value, drives the computation forward and returns nothing."""

_ACTIVE: contextvars.ContextVar[Optional[Trampoline]] = contextvars.ContextVar("pathwise_trampoline", default=None)


class ExplorationState(Enum):
    RUNNING = auto()
    RESUMING = auto()
    EXHAUSTED = auto()


@dataclass
class PendingBranch:
    """A suspended alternative: the continuation of a `sample` call together with the value it resumes with."""

    continuation: Continuation
    resume_value: Any
    log_weight: float = 0.0
    """The weight of the path up to and including the choice of `resume_value`."""
    consumed: bool = field(default=False, compare=False)

    def resume(self, trampoline: Trampoline) -> None:
        if self.consumed:
            raise ContinuationReuseError(f"The branch resuming with {self.resume_value!r} was already resumed")
        self.consumed = True
        trampoline.begin_path(self.log_weight)
        self.continuation(self.resume_value)


class Trampoline:
    """
    Worklist and path weight of a single exploration.

    The worklist is a LIFO stack. `pushed` and `popped` count all branches that ever entered and left it,
    so ``pushed == popped`` holds exactly when no branch is left behind.
    """

    def __init__(self, config: EnumerationConfig = EnumerationConfig(), exhaustive: bool = True):
        self.config = config
        self.exhaustive = exhaustive
        """If false, every `sample` follows its first support value and no branch is ever forked."""
        self.weight: float = 0.0
        self.state = ExplorationState.RUNNING
        self.pushed = 0
        self.popped = 0
        self.completed_paths = 0
        self._worklist: List[PendingBranch] = []
        self._path_open = False

    @property
    def pending(self) -> int:
        """The number of branches currently waiting on the worklist."""
        return len(self._worklist)

    @property
    def path_open(self) -> bool:
        return self._path_open

    def exploration_order(self, support: Sequence[Any]) -> List[Any]:
        """
        Returns the support values in the order in which their paths are going to be explored.
        """
        if self.config.sibling_order == SiblingOrder.DECLARED:
            return list(support)
        return list(reversed(support))

    def fork(self, branches: Sequence[PendingBranch]) -> None:
        """ Pushes the branches in the given order, so the last one is resumed first."""
        self._worklist.extend(branches)
        self.pushed += len(branches)
        logger.debug("Forked %d branches, %d pending", len(branches), len(self._worklist))

    def resume_next(self) -> Optional[PendingBranch]:
        """ Pops the most recently pushed branch, or returns `None` if the worklist is exhausted."""
        self.state = ExplorationState.RESUMING
        if not self._worklist:
            self.state = ExplorationState.EXHAUSTED
            return None
        self.popped += 1
        self.state = ExplorationState.RUNNING
        return self._worklist.pop()

    def add_weight(self, log_weight: float) -> None:
        self.weight += log_weight

    @property
    def impossible(self) -> bool:
        return self.weight == -math.inf

    def begin_path(self, log_weight: float) -> None:
        self.weight = log_weight
        self._path_open = True

    def end_path(self) -> None:
        """
        Marks the current path as finished, either by reaching the exit continuation or by being pruned.

        :raises ContinuationReuseError: if the current path was already finished.
        :raises BudgetExceeded: if more paths than allowed have been completed.
        """
        if not self._path_open:
            raise ContinuationReuseError("The exit continuation was invoked twice on the same path")
        self._path_open = False
        self.completed_paths += 1
        max_paths = self.config.max_paths
        if max_paths is not None and self.completed_paths > max_paths:
            raise BudgetExceeded(f"The exploration exceeded the limit of {max_paths} paths")

    def check_path_closed(self) -> None:
        """ Ensures that the path that just returned control to the driver actually reached its end."""
        if self._path_open:
            raise DroppedContinuation("A path returned without invoking its continuation")

    @contextlib.contextmanager
    def activate(self) -> Iterator[Trampoline]:
        """ Makes this trampoline the target of all effect primitives within the `with` block."""
        token = _ACTIVE.set(self)
        try:
            yield self
        finally:
            _ACTIVE.reset(token)


def active_trampoline() -> Trampoline:
    trampoline = _ACTIVE.get()
    if trampoline is None:
        raise NoActiveExploration("sample and factor can only be used by a program run through explore")
    return trampoline
