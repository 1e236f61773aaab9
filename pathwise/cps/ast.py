r"""
---
AST
---

All data types to represent a direct-style probabilistic expression. Such expressions are turned into programs in
continuation-passing style by :mod:`pathwise.cps.transform`.

All expressions can be transformed into human-readable strings using the `str` operator.

.. doctest::

    >>> str(LetExpr("a", SampleExpr("bernoulli", [LitExpr("1/2")]), BinopExpr(Binop.PLUS, VarExpr("a"), LitExpr(1))))
    "let a = bernoulli('1/2') in a + 1"
"""
from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, List, Union

import attr

Var = str


@attr.s
class Node(ABC):
    """Superclass for all node types in the AST."""


class Binop(Enum):
    """What binary operator is it?"""
    OR = auto()
    AND = auto()
    LEQ = auto()
    LE = auto()
    GE = auto()
    GEQ = auto()
    EQ = auto()
    NEQ = auto()
    PLUS = auto()
    MINUS = auto()
    TIMES = auto()
    POWER = auto()
    DIVIDE = auto()
    MODULO = auto()

    def is_short_circuit(self) -> bool:
        """Is the right operand only evaluated depending on the left one?"""
        return self in [Binop.OR, Binop.AND]

    def apply(self, lhs: Any, rhs: Any) -> Any:
        if self == Binop.OR:
            return lhs or rhs
        if self == Binop.AND:
            return lhs and rhs
        return _BINOP_FUNCTIONS[self](lhs, rhs)

    def __repr__(self) -> str:
        # pylint: disable=no-member
        return f'Binop.{self._name_}'

    def __str__(self) -> str:
        return ({
            Binop.OR: "||",
            Binop.AND: "&",
            Binop.LEQ: "<=",
            Binop.LE: "<",
            Binop.GE: ">",
            Binop.GEQ: ">=",
            Binop.EQ: "=",
            Binop.NEQ: "!=",
            Binop.PLUS: "+",
            Binop.MINUS: "-",
            Binop.TIMES: "*",
            Binop.POWER: "^",
            Binop.DIVIDE: "/",
            Binop.MODULO: "%"
        })[self]


_BINOP_FUNCTIONS: dict = {
    Binop.LEQ: operator.le,
    Binop.LE: operator.lt,
    Binop.GE: operator.gt,
    Binop.GEQ: operator.ge,
    Binop.EQ: operator.eq,
    Binop.NEQ: operator.ne,
    Binop.PLUS: operator.add,
    Binop.MINUS: operator.sub,
    Binop.TIMES: operator.mul,
    Binop.POWER: operator.pow,
    Binop.DIVIDE: operator.truediv,
    Binop.MODULO: operator.mod,
}


class Unop(Enum):
    """What unary operator is it?"""
    NEG = auto()
    NOT = auto()

    def apply(self, operand: Any) -> Any:
        if self == Unop.NEG:
            return -operand
        return not operand

    def __repr__(self) -> str:
        # pylint: disable=no-member
        return f'Unop.{self._name_}'

    def __str__(self) -> str:
        return "-" if self == Unop.NEG else "not "


class ExprClass(Node):
    """
    Superclass for all expressions.
    See :obj:`Expr`.
    """

    @abstractmethod
    def __str__(self) -> str:
        """Convert this expression to a human-readable string."""


def expr_str_parens(expr: ExprClass) -> str:
    """Wrap parentheses around an expression, but not for simple expressions."""
    if isinstance(expr, (LitExpr, VarExpr, CallExpr, SampleExpr)):
        return str(expr)
    return f'({expr})'


def _params_str(params: List[Expr]) -> str:
    return ", ".join(str(param) for param in params)


@attr.s(repr=False)
class LitExpr(ExprClass):
    """A constant Python value."""
    value: Any = attr.ib()

    def __str__(self) -> str:
        return repr(self.value)

    def __repr__(self) -> str:
        return f'LitExpr({self.value!r})'


@attr.s(repr=False)
class VarExpr(ExprClass):
    """A variable is an expression."""
    var: Var = attr.ib()

    def __str__(self) -> str:
        return self.var

    def __repr__(self) -> str:
        return f'VarExpr({self.var!r})'


@attr.s
class UnopExpr(ExprClass):
    """A unary operator is an expression."""
    operator: Unop = attr.ib()
    expr: Expr = attr.ib()

    def __str__(self) -> str:
        return f'{self.operator}{expr_str_parens(self.expr)}'


@attr.s
class BinopExpr(ExprClass):
    """A binary operator is an expression."""
    operator: Binop = attr.ib()
    lhs: Expr = attr.ib()
    rhs: Expr = attr.ib()

    def __str__(self) -> str:
        return f'{expr_str_parens(self.lhs)} {self.operator} {expr_str_parens(self.rhs)}'


@attr.s
class IfExpr(ExprClass):
    """Evaluates `true` if `cond` holds and `false` otherwise."""
    cond: Expr = attr.ib()
    true: Expr = attr.ib()
    false: Expr = attr.ib()

    def __str__(self) -> str:
        return f'if {self.cond} then {self.true} else {self.false}'


@attr.s
class LetExpr(ExprClass):
    """
    Binds `var` to the value of `value` within `body`.

    If `value` is a :class:`LambdaExpr`, the binding is recursive, i.e. the function may call itself by `var`.
    """
    var: Var = attr.ib()
    value: Expr = attr.ib()
    body: Expr = attr.ib()

    def __str__(self) -> str:
        return f'let {self.var} = {self.value} in {self.body}'


@attr.s
class SampleExpr(ExprClass):
    """Draws a value from the predefined distribution `distribution` with parameters `params`."""
    distribution: str = attr.ib()
    params: List[Expr] = attr.ib(factory=list)

    def __str__(self) -> str:
        return f'{self.distribution}({_params_str(self.params)})'


@attr.s
class FactorExpr(ExprClass):
    """Re-weights the current execution by the log-weight `weight`. Its value is ``None``."""
    weight: Expr = attr.ib()

    def __str__(self) -> str:
        return f'factor({self.weight})'


@attr.s
class ConditionExpr(ExprClass):
    """Rules out all executions in which `cond` does not hold. Its value is ``None``."""
    cond: Expr = attr.ib()

    def __str__(self) -> str:
        return f'condition({self.cond})'


@attr.s
class ObserveExpr(ExprClass):
    """Conditions on `value` being drawn from `distribution`. Its value is the observed value."""
    distribution: str = attr.ib()
    params: List[Expr] = attr.ib()
    value: Expr = attr.ib()

    def __str__(self) -> str:
        return f'observe({self.distribution}({_params_str(self.params)}), {self.value})'


@attr.s
class LambdaExpr(ExprClass):
    """An anonymous function."""
    params: List[Var] = attr.ib()
    body: Expr = attr.ib()

    def __str__(self) -> str:
        return f'fun ({", ".join(self.params)}) -> {self.body}'


@attr.s
class CallExpr(ExprClass):
    """
    Applies `function` to `args`.

    The function is either a :class:`LambdaExpr` value, or a plain Python callable from the environment which is
    called in direct style.
    """
    function: Expr = attr.ib()
    args: List[Expr] = attr.ib(factory=list)

    def __str__(self) -> str:
        return f'{expr_str_parens(self.function)}({_params_str(self.args)})'


Expr = Union[LitExpr, VarExpr, UnopExpr, BinopExpr, IfExpr, LetExpr, SampleExpr, FactorExpr, ConditionExpr,
             ObserveExpr, LambdaExpr, CallExpr]
"""Union type for all expression objects. See :class:`ExprClass` for use with isinstance."""
