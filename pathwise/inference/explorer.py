from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from pathwise.inference.config import EnumerationConfig
from pathwise.inference.posterior import Posterior, aggregate
from pathwise.inference.trampoline import Continuation, ExplorationState, Trampoline
from pathwise.util.logger import log_setup

logger = log_setup(str(__name__).rsplit(".")[-1], logging.DEBUG)

Program = Callable[[Continuation], None]
"""A program in continuation-passing style: called with the exit continuation, which receives the return value."""


@dataclass(frozen=True)
class Outcome:
    """The return value of one complete execution path together with its accumulated log-weight."""

    return_value: Any
    log_weight: float

    @property
    def probability(self) -> float:
        return math.exp(self.log_weight)

    @property
    def impossible(self) -> bool:
        return self.log_weight == -math.inf


class Explorer:
    """
    Drives a program through every execution path.

    The exit continuation records an outcome and returns; the driver loop then resumes the next pending branch
    until the worklist is exhausted.
    """

    def __init__(self, program: Program, config: Optional[EnumerationConfig] = None, exhaustive: bool = True):
        self.program = program
        self.config = config if config is not None else EnumerationConfig()
        self.trampoline = Trampoline(self.config, exhaustive=exhaustive)
        self.outcomes: List[Outcome] = []

    @property
    def state(self) -> ExplorationState:
        return self.trampoline.state

    def _exit(self, return_value: Any) -> None:
        trampoline = self.trampoline
        trampoline.end_path()
        outcome = Outcome(return_value, trampoline.weight)
        logger.debug("Path %d returned %r with log-weight %s", trampoline.completed_paths, return_value,
                     outcome.log_weight)
        if self.config.show_intermediate_steps:
            print(f"Outcome: {return_value!r}\t log-weight: {outcome.log_weight}")
        if outcome.impossible and not self.config.keep_impossible:
            return
        self.outcomes.append(outcome)

    def run(self) -> List[Outcome]:
        trampoline = self.trampoline
        logger.info("Start exploration of %s", getattr(self.program, "__name__", self.program))
        with trampoline.activate():
            trampoline.begin_path(0.0)
            self.program(self._exit)
            trampoline.check_path_closed()
            branch = trampoline.resume_next()
            while branch is not None:
                branch.resume(trampoline)
                trampoline.check_path_closed()
                branch = trampoline.resume_next()
        assert trampoline.pending == 0 and trampoline.pushed == trampoline.popped, "Leaked pending branches"
        logger.info("Exploration finished after %d paths with %d outcomes", trampoline.completed_paths,
                    len(self.outcomes))
        return self.outcomes


def explore(program: Program, config: Optional[EnumerationConfig] = None) -> List[Outcome]:
    """
    Enumerates all execution paths of `program` in depth-first order.

    :param program: the program in continuation-passing style.
    :param config: the enumeration options, see :class:`EnumerationConfig`.

    :return: one outcome per completed path, in exploration order.
    """
    return Explorer(program, config).run()


def explore_first(program: Program) -> Outcome:
    """ Runs only the path that takes the first support value at every `sample`."""
    [outcome] = Explorer(program, exhaustive=False).run()
    return outcome


def infer(program: Program, config: Optional[EnumerationConfig] = None) -> Posterior:
    """ Computes the normalized posterior over the return values of `program`."""
    return aggregate(explore(program, config))
