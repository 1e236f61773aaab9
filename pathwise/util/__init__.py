"""
=================
``pathwise.util``
=================

.. autofunction:: pathwise.util.log_sum_exp
"""
import math
from typing import Iterable


def log_sum_exp(log_values: Iterable[float]) -> float:
    """
    Computes ``log(sum(exp(v) for v in log_values))`` without overflowing or underflowing.

    An empty input, or an input consisting only of ``-inf``, has log-sum ``-inf``.

    .. doctest::

        >>> log_sum_exp([0.0, -math.inf])
        0.0
        >>> log_sum_exp([])
        -inf
    """
    values = list(log_values)
    if not values:
        return -math.inf
    maximum = max(values)
    if maximum == -math.inf:
        return -math.inf
    if maximum == math.inf:
        return math.inf
    return maximum + math.log(math.fsum(math.exp(value - maximum) for value in values))
