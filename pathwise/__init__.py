"""
pathwise computes the exact posterior of discrete probabilistic programs by exploring every execution path.

Programs are written in continuation-passing style, either by hand or via :mod:`pathwise.cps`:

.. doctest::

    >>> from pathwise import Bernoulli, infer, sample
    >>> def two_coins(k):
    ...     sample(lambda a: sample(lambda b: k(a + b), Bernoulli("1/2")), Bernoulli("1/2"))
    >>> infer(two_coins)[1]
    0.5
"""
from .inference import (BudgetExceeded, ConfigurationError, DomainError, EmptyPosterior, EnumerationConfig,
                        EnumerationError, Outcome, Posterior, SiblingOrder, aggregate, condition, cps, explore,
                        explore_first, factor, infer, observe, sample)
from .distribution import (Bernoulli, Binomial, Categorical, Dirac, DiscreteUniform, Distribution,
                           Distributions)
