from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Optional, Sequence

import sympy

from pathwise.distribution.distribution import (Distribution, DistributionParam, FiniteDistribution,
                                                parse_integer, parse_probability)
from pathwise.inference.exceptions import DomainError


class Bernoulli(FiniteDistribution):
    """ A bernoulli distribution with parameter `p` over the values ``0`` and ``1``."""
    name = "bernoulli"

    def __init__(self, p: DistributionParam):
        self.p = parse_probability(p, "success probability")
        super().__init__([0, 1], [1 - self.p, self.p])


class Categorical(FiniteDistribution):
    """
    An explicit finite distribution assigning `probabilities[i]` to `values[i]`.

    Without probabilities, all values are equally likely.
    """
    name = "categorical"

    def __init__(self, values: Sequence[Any], probabilities: Optional[Sequence[DistributionParam]] = None):
        values = list(values)
        if not values:
            raise DomainError("A categorical distribution needs at least one value")
        if probabilities is None:
            probs = [sympy.Rational(1, len(values))] * len(values)
        else:
            probs = [parse_probability(prob) for prob in probabilities]
            total = sympy.Add(*probs)
            # float parameters are accepted up to rounding
            if total != 1 and abs(float(total) - 1) > 1e-9:
                raise DomainError(f"Probabilities need to sum up to 1, got {total}")
        super().__init__(values, probs)


class DiscreteUniform(FiniteDistribution):
    """ A uniform distribution over the integers in [`start`, `end`]."""
    name = "uniform"

    def __init__(self, start: DistributionParam, end: DistributionParam):
        self.start = parse_integer(start, "lower bound")
        self.end = parse_integer(end, "upper bound")
        if self.start > self.end:
            raise DomainError(f"Empty range [{self.start}, {self.end}]")
        count = self.end - self.start + 1
        super().__init__(list(range(self.start, self.end + 1)), [sympy.Rational(1, count)] * count)


class Binomial(FiniteDistribution):
    """ A binomial distribution counting the successes of `n` independent trials with success probability `p`."""
    name = "binomial"

    def __init__(self, n: DistributionParam, p: DistributionParam):
        self.n = parse_integer(n, "number of trials")
        if self.n < 0:
            raise DomainError(f"The number of trials must not be negative, got {n!r}")
        self.p = parse_probability(p, "success probability")
        super().__init__(
            list(range(self.n + 1)),
            [sympy.binomial(self.n, k) * self.p ** k * (1 - self.p) ** (self.n - k) for k in range(self.n + 1)])


class Dirac(FiniteDistribution):
    """ The point mass on `value`."""
    name = "dirac"

    def __init__(self, value: Any):
        super().__init__([value], [sympy.Integer(1)])


class Distributions:
    """ Factory for the predefined distributions, addressable by name."""

    @staticmethod
    def bernoulli(p: DistributionParam) -> Distribution:
        """ A bernoulli distribution with parameter `p`."""
        return Bernoulli(p)

    @staticmethod
    def categorical(values: Sequence[Any],
                    probabilities: Optional[Sequence[DistributionParam]] = None) -> Distribution:
        """ A categorical distribution over `values`."""
        return Categorical(values, probabilities)

    @staticmethod
    def uniform(start: DistributionParam, end: DistributionParam) -> Distribution:
        """ A uniform distribution with bounds [`start`, `end`]."""
        return DiscreteUniform(start, end)

    @staticmethod
    def binomial(n: DistributionParam, p: DistributionParam) -> Distribution:
        """ A binomial distribution with parameters `n` and `p`."""
        return Binomial(n, p)

    @staticmethod
    def dirac(value: Any) -> Distribution:
        """ The distribution that always yields `value`."""
        return Dirac(value)

    @staticmethod
    def names() -> Sequence[str]:
        return tuple(_CONSTRUCTORS)

    @staticmethod
    def from_name(name: str, *params: Any) -> Distribution:
        """
        Constructs the distribution called `name` with the given parameters.

        .. doctest::

            >>> Distributions.from_name("bernoulli", "1/4").support()
            (0, 1)
        """
        try:
            constructor = _CONSTRUCTORS[name]
        except KeyError:
            raise DomainError(f"Unknown distribution {name!r}") from None
        try:
            inspect.signature(constructor).bind(*params)
        except TypeError as err:
            raise DomainError(f"Wrong number of parameters for {name}: {params!r}") from err
        try:
            return constructor(*params)
        except TypeError as err:
            raise DomainError(f"Invalid parameters for {name}: {err}") from err


_CONSTRUCTORS: Dict[str, Callable[..., Distribution]] = {
    "bernoulli": Distributions.bernoulli,
    "flip": Distributions.bernoulli,
    "categorical": Distributions.categorical,
    "uniform": Distributions.uniform,
    "unif_d": Distributions.uniform,
    "binomial": Distributions.binomial,
    "dirac": Distributions.dirac,
}
