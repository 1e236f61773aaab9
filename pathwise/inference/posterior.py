"""
---------
Posterior
---------

Turns the outcomes of an exploration into a normalized distribution over return values.

.. doctest::

    >>> from pathwise.inference.explorer import Outcome
    >>> import math
    >>> posterior = aggregate([Outcome("a", math.log(0.1)), Outcome("b", math.log(0.1)), Outcome("a", math.log(0.2))])
    >>> round(posterior["a"], 6)
    0.75
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from pathwise.inference.exceptions import EmptyPosterior
from pathwise.util import log_sum_exp
from pathwise.util.logger import log_setup

if TYPE_CHECKING:
    from pathwise.inference.explorer import Outcome

logger = log_setup(str(__name__).rsplit(".")[-1], logging.DEBUG)


class _ValueIndex:
    """Finds the position of a value by equality. Hashable values are looked up in a dict, all others by scanning."""

    def __init__(self):
        self.values: List[Any] = []
        self._positions: Dict[Any, int] = {}

    def find(self, value: Any) -> Optional[int]:
        try:
            return self._positions.get(value)
        except TypeError:
            for position, candidate in enumerate(self.values):
                if candidate == value:
                    return position
            return None

    def add(self, value: Any) -> int:
        position = len(self.values)
        self.values.append(value)
        try:
            self._positions[value] = position
        except TypeError:
            pass
        return position


class Posterior(Mapping):
    """
    A normalized probability mass function over the return values of a program.

    Values are kept in the order of their first appearance among the outcomes. Values that were only ever
    returned by impossible paths are not part of the posterior.
    """

    def __init__(self, probabilities: Sequence[Tuple[Any, float]], log_evidence: float = 0.0):
        self._index = _ValueIndex()
        self._probabilities: List[float] = []
        for value, probability in probabilities:
            if self._index.find(value) is not None:
                raise ValueError(f"The value {value!r} occurs more than once")
            self._index.add(value)
            self._probabilities.append(probability)
        self.log_evidence = log_evidence
        """The log of the total unnormalized mass of all outcomes."""

    def __getitem__(self, value: Any) -> float:
        position = self._index.find(value)
        if position is None:
            raise KeyError(value)
        return self._probabilities[position]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._index.values)

    def __len__(self) -> int:
        return len(self._probabilities)

    def support(self) -> Tuple[Any, ...]:
        return tuple(self._index.values)

    def probability_of(self, value: Any) -> float:
        """ Returns the probability of `value`, which is zero for values that never occurred."""
        position = self._index.find(value)
        return 0.0 if position is None else self._probabilities[position]

    def probability_of_event(self, predicate: Callable[[Any], bool]) -> float:
        """ Returns the probability that the return value satisfies `predicate`."""
        return math.fsum(prob for value, prob in zip(self._index.values, self._probabilities) if predicate(value))

    def expected_value(self, function: Optional[Callable[[Any], float]] = None) -> float:
        """ Returns the expectation of `function` (by default the return value itself)."""
        if function is None:
            function = lambda value: value  # pylint: disable=unnecessary-lambda-assignment
        return math.fsum(function(value) * prob for value, prob in zip(self._index.values, self._probabilities))

    def mode(self) -> Any:
        """ Returns the most probable value. Ties are broken in favour of the earlier value."""
        best = max(range(len(self._probabilities)), key=lambda position: (self._probabilities[position], -position))
        return self._index.values[best]

    def total_mass(self) -> float:
        return math.fsum(self._probabilities)

    def is_normalized(self, tolerance: float = 1e-9) -> bool:
        return abs(self.total_mass() - 1) <= tolerance

    def __str__(self) -> str:
        return "{" + ", ".join(f"{value!r}: {prob:.6g}" for value, prob in self.items()) + "}"

    def __repr__(self) -> str:
        return f"Posterior({list(self.items())!r})"


def aggregate(outcomes: Iterable[Outcome]) -> Posterior:
    """
    Groups the outcomes by return value, sums their weights in log-space and normalizes.

    :raises EmptyPosterior: if there are no outcomes, or all of them have probability zero.
    """
    index = _ValueIndex()
    weights: List[List[float]] = []
    for outcome in outcomes:
        position = index.find(outcome.return_value)
        if position is None:
            position = index.add(outcome.return_value)
            weights.append([])
        weights[position].append(outcome.log_weight)

    if not weights:
        raise EmptyPosterior("There are no outcomes to aggregate.")

    group_totals = [log_sum_exp(group) for group in weights]
    total = log_sum_exp(group_totals)
    if total == -math.inf:
        raise EmptyPosterior("Undefined semantics: every execution path has probability 0.")
    logger.debug("Aggregated %d distinct values with log-evidence %s", len(group_totals), total)

    return Posterior([(value, math.exp(group_total - total))
                      for value, group_total in zip(index.values, group_totals)
                      if group_total != -math.inf],
                     log_evidence=total)
