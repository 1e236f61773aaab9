"""
General Classes
###############

.. automodule:: pathwise.distribution.distribution
   :members:

Predefined Distributions
########################

.. automodule:: pathwise.distribution.catalog
"""

from .distribution import Distribution, DistributionParam, FiniteDistribution
from .catalog import Bernoulli, Binomial, Categorical, Dirac, DiscreteUniform, Distributions
