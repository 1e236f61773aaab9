"""
-----------------
Effect Primitives
-----------------

`sample` and `factor` are the only operations of a program that talk to the trampoline. Both are written in
continuation-passing style: they receive the rest of the computation as their first argument and hand their
result to it instead of returning it.

.. doctest::

    >>> from pathwise.distribution import Bernoulli
    >>> from pathwise.inference.explorer import explore
    >>> def coin(k):
    ...     sample(k, Bernoulli("1/2"))
    >>> [outcome.return_value for outcome in explore(coin)]
    [1, 0]
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Callable

from pathwise.inference.exceptions import DomainError
from pathwise.inference.trampoline import Continuation, PendingBranch, Trampoline, active_trampoline
from pathwise.util.logger import log_setup

if TYPE_CHECKING:
    from pathwise.distribution import Distribution

logger = log_setup(str(__name__).rsplit(".")[-1], logging.DEBUG)


def sample(continuation: Continuation, distribution: Distribution) -> None:
    """
    Draws every value of `distribution` by forking the current path.

    The first value of the exploration order is continued immediately, all siblings are pushed onto the worklist
    together with the path weight they will resume with.
    """
    trampoline = active_trampoline()
    support = distribution.support()
    if len(support) == 0:
        raise DomainError(f"Cannot sample from {distribution.name} with an empty support")

    base_weight = trampoline.weight
    if not trampoline.exhaustive:
        trampoline.weight = base_weight + distribution.score(support[0])
        continuation(support[0])
        return

    order = trampoline.exploration_order(support)
    trampoline.fork([
        PendingBranch(continuation, value, base_weight + distribution.score(value))
        for value in reversed(order[1:])
    ])
    trampoline.weight = base_weight + distribution.score(order[0])
    continuation(order[0])


def _reweigh(trampoline: Trampoline, log_weight: float) -> bool:
    """Adds `log_weight` to the current path. Returns whether the path continues."""
    trampoline.add_weight(log_weight)
    if trampoline.impossible and trampoline.config.prune_impossible:
        logger.debug("Pruned an impossible path, %d pending", trampoline.pending)
        trampoline.end_path()
        return False
    return True


def _check_log_weight(log_weight: Any) -> float:
    try:
        value = float(log_weight)
    except (TypeError, ValueError) as err:
        raise DomainError(f"A log-weight has to be a number, got {log_weight!r}") from err
    if math.isnan(value) or value == math.inf:
        raise DomainError(f"Invalid log-weight {log_weight!r}")
    return value


def factor(continuation: Continuation, log_weight: float) -> None:
    """
    Re-weights the current path by `log_weight` and continues with ``None``.

    A log-weight of ``-inf`` marks the path as impossible.
    """
    trampoline = active_trampoline()
    if _reweigh(trampoline, _check_log_weight(log_weight)):
        continuation(None)


def condition(continuation: Continuation, predicate: bool) -> None:
    """ Rules out the current path unless `predicate` holds."""
    factor(continuation, 0.0 if predicate else -math.inf)


def observe(continuation: Continuation, distribution: Distribution, value: Any) -> None:
    """
    Conditions on `value` being drawn from `distribution` and continues with `value`.

    Values outside the support make the path impossible.
    """
    trampoline = active_trampoline()
    log_weight = distribution.score(value) if value in distribution else -math.inf
    if _reweigh(trampoline, log_weight):
        continuation(value)


def cps(function: Callable[..., Any]) -> Callable[..., None]:
    """
    Lifts a deterministic function into continuation-passing style, i.e. ``cps(f)(k, *args)`` calls
    ``k(f(*args))``.
    """

    def lifted(continuation: Continuation, *args, **kwargs) -> None:
        continuation(function(*args, **kwargs))

    lifted.__name__ = f"cps_{getattr(function, '__name__', 'function')}"
    return lifted
