"""
-----------------
CPS Transformation
-----------------

Rewrites a direct-style expression into a term in continuation-passing style.

Every expression becomes a CPS term, a function ``term(env, continuation)`` that evaluates the expression in the
environment `env` and passes its value to `continuation` instead of returning it. The rewrite is recursive with one
case per node type: compound expressions first evaluate their sub-expressions, each with a freshly built
continuation for the rest of the evaluation, and `sample`, `factor`, `condition` and `observe` expressions hand
their continuation to the corresponding effect primitive.

.. doctest::

    >>> from pathwise.cps.ast import BinopExpr, Binop, LetExpr, LitExpr, SampleExpr, VarExpr
    >>> from pathwise.inference import infer
    >>> flip = SampleExpr("bernoulli", [LitExpr("1/2")])
    >>> expr = LetExpr("a", flip, LetExpr("b", flip, BinopExpr(Binop.PLUS, VarExpr("a"), VarExpr("b"))))
    >>> infer(to_program(expr))[2]
    0.25
"""
from __future__ import annotations

import logging
from collections import ChainMap
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from pathwise.cps.ast import (BinopExpr, CallExpr, ConditionExpr, Expr, FactorExpr, IfExpr, LambdaExpr, LetExpr,
                              LitExpr, ObserveExpr, SampleExpr, UnopExpr, Var, VarExpr)
from pathwise.distribution import Distributions
from pathwise.inference.explorer import Program
from pathwise.inference.primitives import condition, factor, observe, sample
from pathwise.inference.trampoline import Continuation
from pathwise.util.logger import log_setup

logger = log_setup(str(__name__).rsplit(".")[-1], logging.DEBUG)

Environment = ChainMap
CPSTerm = Callable[[Environment, Continuation], None]


class Closure:
    """The value of a :class:`LambdaExpr`: a function in continuation-passing style, i.e. ``closure(k, *args)``."""

    def __init__(self, params: Sequence[Var], body: CPSTerm, env: Environment):
        self.params = list(params)
        self.body = body
        self.env = env

    def __call__(self, continuation: Continuation, *args: Any) -> None:
        if len(args) != len(self.params):
            raise TypeError(f"Expected {len(self.params)} arguments, got {len(args)}")
        self.body(self.env.new_child(dict(zip(self.params, args))), continuation)

    def __repr__(self) -> str:
        return f"Closure({', '.join(self.params)})"


def _evaluate_all(terms: Sequence[CPSTerm], env: Environment, continuation: Callable[[List[Any]], None]) -> None:
    """Evaluates the terms from left to right and continues with the list of their values."""
    # a forked path resumes the same continuation again, so the collected values are never mutated
    def step(index: int, values: Tuple[Any, ...]) -> None:
        if index == len(terms):
            continuation(list(values))
            return
        terms[index](env, lambda value: step(index + 1, values + (value,)))

    step(0, ())


def _transform_params(params: Sequence[Expr]) -> List[CPSTerm]:
    return [cps_transform(param) for param in params]


def cps_transform(expr: Expr) -> CPSTerm:
    """
    Rewrites `expr` into a CPS term.

    :raises TypeError: if `expr` contains a node that is not an expression.
    """
    if isinstance(expr, LitExpr):
        value = expr.value
        return lambda env, k: k(value)

    if isinstance(expr, VarExpr):
        name = expr.var

        def lookup(env: Environment, k: Continuation) -> None:
            try:
                value = env[name]
            except KeyError:
                raise NameError(f"Unbound variable {name!r}") from None
            k(value)

        return lookup

    if isinstance(expr, UnopExpr):
        operator, operand = expr.operator, cps_transform(expr.expr)
        return lambda env, k: operand(env, lambda value: k(operator.apply(value)))

    if isinstance(expr, BinopExpr):
        operator, lhs, rhs = expr.operator, cps_transform(expr.lhs), cps_transform(expr.rhs)
        if operator.is_short_circuit():
            def short_circuit(env: Environment, k: Continuation) -> None:
                def with_lhs(left: Any) -> None:
                    # `a & b` stops at a falsy `a`, `a || b` at a truthy one
                    if bool(left) == (operator.name == "OR"):
                        k(left)
                    else:
                        rhs(env, k)

                lhs(env, with_lhs)

            return short_circuit
        return lambda env, k: lhs(env, lambda left: rhs(env, lambda right: k(operator.apply(left, right))))

    if isinstance(expr, IfExpr):
        cond, true, false = cps_transform(expr.cond), cps_transform(expr.true), cps_transform(expr.false)
        return lambda env, k: cond(env, lambda value: (true if value else false)(env, k))

    if isinstance(expr, LetExpr):
        var, body = expr.var, cps_transform(expr.body)
        if isinstance(expr.value, LambdaExpr):
            params, function_body = list(expr.value.params), cps_transform(expr.value.body)

            def let_rec(env: Environment, k: Continuation) -> None:
                scope = env.new_child()
                scope[var] = Closure(params, function_body, scope)
                body(scope, k)

            return let_rec

        value_term = cps_transform(expr.value)
        return lambda env, k: value_term(env, lambda value: body(env.new_child({var: value}), k))

    if isinstance(expr, LambdaExpr):
        params, body = list(expr.params), cps_transform(expr.body)
        return lambda env, k: k(Closure(params, body, env))

    if isinstance(expr, CallExpr):
        function, args = cps_transform(expr.function), _transform_params(expr.args)

        def call(env: Environment, k: Continuation) -> None:
            def with_function(func: Any) -> None:
                def with_args(values: List[Any]) -> None:
                    if isinstance(func, Closure):
                        func(k, *values)
                    elif callable(func):
                        k(func(*values))
                    else:
                        raise TypeError(f"{func!r} is not callable")

                _evaluate_all(args, env, with_args)

            function(env, with_function)

        return call

    if isinstance(expr, SampleExpr):
        name, params = expr.distribution, _transform_params(expr.params)
        return lambda env, k: _evaluate_all(
            params, env, lambda values: sample(k, Distributions.from_name(name, *values)))

    if isinstance(expr, ObserveExpr):
        name, params, observed = expr.distribution, _transform_params(expr.params), cps_transform(expr.value)
        return lambda env, k: _evaluate_all(
            params, env, lambda values: observed(
                env, lambda value: observe(k, Distributions.from_name(name, *values), value)))

    if isinstance(expr, FactorExpr):
        weight = cps_transform(expr.weight)
        return lambda env, k: weight(env, lambda value: factor(k, value))

    if isinstance(expr, ConditionExpr):
        cond = cps_transform(expr.cond)
        return lambda env, k: cond(env, lambda value: condition(k, bool(value)))

    raise TypeError(f"Cannot transform {expr!r} into continuation-passing style")


def to_program(expr: Expr, env: Optional[Mapping[str, Any]] = None) -> Program:
    """
    Turns `expr` into a program that can be passed to `explore`.

    :param expr: the direct-style expression; its value is the return value of the program.
    :param env: initial variable bindings, e.g. Python functions that can be called from the expression.
    """
    term = cps_transform(expr)
    initial = dict(env or {})
    logger.debug("Transformed %s", expr)

    def program(continuation: Continuation) -> None:
        term(ChainMap({}, initial), continuation)

    program.__name__ = f"cps({expr})"
    return program
