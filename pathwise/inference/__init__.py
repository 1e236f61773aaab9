"""
===========
Enumeration
===========

Exact inference by enumerating every execution path of a program written in continuation-passing style.

The Semantics
#############

A program is an ordinary computation that uses two effects, :func:`sample` and :func:`factor`. Both receive the
rest of the computation as a continuation. `sample` forks the current path once per support value, `factor`
re-weights it. The trampoline keeps all suspended alternatives on an explicit worklist so that the host call stack
only ever holds a single path.

.. automodule:: pathwise.inference.primitives
.. automodule:: pathwise.inference.trampoline

Driver and Posterior
####################

:func:`explore` runs a program to exhaustion and returns its outcomes, :func:`aggregate` normalizes them into a
:class:`Posterior`.

.. automodule:: pathwise.inference.explorer
.. automodule:: pathwise.inference.posterior

Configuration
#############

Path budgets, pruning of impossible paths and the order of sibling branches are set up in an
`EnumerationConfig` object.

.. automodule:: pathwise.inference.config
"""
from .config import EnumerationConfig, SiblingOrder
from .exceptions import (BudgetExceeded, ConfigurationError, ContinuationReuseError, DomainError,
                         DroppedContinuation, EmptyPosterior, EnumerationError, NoActiveExploration)
from .primitives import condition, cps, factor, observe, sample
from .posterior import Posterior, aggregate
from .explorer import Explorer, Outcome, explore, explore_first, infer
