from __future__ import annotations

import math
from abc import ABC, abstractmethod
from fractions import Fraction
from typing import Any, Dict, Iterator, Sequence, Tuple, Union

import sympy

from pathwise.inference.exceptions import DomainError

DistributionParam = Union[int, float, str, Fraction, sympy.Expr]


def parse_param(param: DistributionParam, name: str = "parameter") -> sympy.Expr:
    """
    Turns a user supplied distribution parameter into an exact sympy number.

    Strings are parsed as numeric expressions, e.g. ``"1/3"`` or ``"2**-3"``.
    Symbolic parameters cannot be enumerated and are rejected.
    """
    if isinstance(param, bool):
        raise DomainError(f"The {name} must be numeric, got {param!r}")
    try:
        expr = sympy.S(param)
    except (sympy.SympifyError, TypeError, SyntaxError) as err:
        raise DomainError(f"Could not parse the {name} {param!r}") from err
    if not isinstance(expr, sympy.Expr) or expr.free_symbols:
        raise DomainError(f"The {name} must be a numeric constant, got {param!r}")
    if expr.is_real is not True or expr.is_finite is not True:
        raise DomainError(f"The {name} must be a finite real number, got {param!r}")
    return expr


def parse_probability(param: DistributionParam, name: str = "probability") -> sympy.Expr:
    """Parses a parameter which has to lie within the unit interval."""
    expr = parse_param(param, name)
    if expr < 0 or expr > 1:
        raise DomainError(f"The {name} has to be within [0, 1], got {param!r}")
    return expr


def parse_integer(param: DistributionParam, name: str = "parameter") -> int:
    """Parses a parameter which has to be an integer."""
    expr = parse_param(param, name)
    if expr.is_integer is not True:
        raise DomainError(f"The {name} has to be an integer, got {param!r}")
    return int(expr)


def log_probability(prob: sympy.Expr) -> float:
    """
    Returns the natural logarithm of a positive exact probability.

    The logarithm is taken before rounding to a float, so probabilities below the smallest float still get a
    finite score.
    """
    if isinstance(prob, sympy.Rational):
        return math.log(int(prob.p)) - math.log(int(prob.q))
    return float(sympy.log(prob))


class Distribution(ABC):
    """
    Abstract class that models a discrete probability distribution with finite support.

    A distribution is never sampled directly. Every draw goes through the `sample` primitive, which enumerates
    :meth:`support` and weighs each alternative by :meth:`score`.
    """

    name: str = "distribution"

    @abstractmethod
    def support(self) -> Tuple[Any, ...]:
        """ Returns the ordered, finite sequence of all values with nonzero probability."""

    @abstractmethod
    def score(self, value: Any) -> float:
        """
        Returns the log-probability of `value`.

        :raises DomainError: if `value` is not part of the support.
        """

    def probability(self, value: Any) -> float:
        """ Returns the probability of `value`."""
        return math.exp(self.score(value))

    def __contains__(self, value: Any) -> bool:
        return value in self.support()

    def __iter__(self) -> Iterator[Any]:
        return iter(self.support())

    def __len__(self) -> int:
        return len(self.support())

    def __str__(self) -> str:
        terms = ", ".join(f"{value!r}: {self.probability(value):.6g}" for value in self.support())
        return f"{self.name}{{{terms}}}"


class FiniteDistribution(Distribution):
    """
    A distribution given by an explicit table of values and exact probabilities.

    Values with probability zero are dropped from the support, so every score is finite.
    """

    def __init__(self, values: Sequence[Any], probabilities: Sequence[sympy.Expr]):
        if len(values) != len(probabilities):
            raise DomainError(
                f"Got {len(values)} values but {len(probabilities)} probabilities")
        table = [(value, prob) for value, prob in zip(values, probabilities) if prob != 0]
        if not table:
            raise DomainError(f"The {self.name} distribution has an empty support")
        support = [value for value, _ in table]
        self._positions: Dict[Any, int] = {}
        for position, value in enumerate(support):
            try:
                duplicate = value in self._positions
                self._positions[value] = position
            except TypeError:
                duplicate = value in support[:position]
            if duplicate:
                raise DomainError(f"The value {value!r} occurs more than once in the support")
        self._support: Tuple[Any, ...] = tuple(support)
        self._probabilities: Tuple[sympy.Expr, ...] = tuple(prob for _, prob in table)
        self._scores: Tuple[float, ...] = tuple(log_probability(prob) for prob in self._probabilities)

    def _position(self, value: Any) -> int:
        try:
            position = self._positions.get(value)
        except TypeError:
            position = None
        if position is None:
            position = next((index for index, candidate in enumerate(self._support) if candidate == value), None)
        if position is None:
            raise DomainError(f"{value!r} is not in the support of the {self.name} distribution")
        return position

    def support(self) -> Tuple[Any, ...]:
        return self._support

    def __contains__(self, value: Any) -> bool:
        try:
            self._position(value)
        except DomainError:
            return False
        return True

    def score(self, value: Any) -> float:
        return self._scores[self._position(value)]

    def exact_probability(self, value: Any) -> sympy.Expr:
        """ Returns the probability of `value` as an exact sympy number."""
        return self._probabilities[self._position(value)]

    def __eq__(self, other) -> bool:
        if not isinstance(other, FiniteDistribution):
            return False
        return self.name == other.name and self._support == other._support \
            and self._probabilities == other._probabilities

    __hash__ = None  # type: ignore

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._support)!r}, {[str(p) for p in self._probabilities]!r})"
