"""
==============
CPS Front-End
==============

Programs for :func:`pathwise.inference.explore` are written in continuation-passing style. Instead of writing
them by hand, a direct-style expression built from the nodes in :mod:`pathwise.cps.ast` can be rewritten
automatically.

.. automodule:: pathwise.cps.ast
.. automodule:: pathwise.cps.transform
"""
from .ast import (Binop, BinopExpr, CallExpr, ConditionExpr, Expr, ExprClass, FactorExpr, IfExpr, LambdaExpr,
                  LetExpr, LitExpr, ObserveExpr, SampleExpr, Unop, UnopExpr, VarExpr)
from .transform import Closure, cps_transform, to_program
