import math

import pytest

from pathwise.cps import (Binop, BinopExpr, CallExpr, Closure, ConditionExpr, FactorExpr, IfExpr, LambdaExpr,
                          LetExpr, LitExpr, ObserveExpr, SampleExpr, Unop, UnopExpr, VarExpr, cps_transform,
                          to_program)
from pathwise.inference import DomainError, explore, infer

FLIP = SampleExpr("bernoulli", [LitExpr("1/2")])


def plus(lhs, rhs):
    return BinopExpr(Binop.PLUS, lhs, rhs)


def test_literal():
    assert [outcome.return_value for outcome in explore(to_program(LitExpr(5)))] == [5]


def test_binomial_matches_hand_written_program():
    expr = LetExpr("a", FLIP, LetExpr("b", FLIP, LetExpr("c", FLIP,
                                                         plus(plus(VarExpr("a"), VarExpr("b")), VarExpr("c")))))
    outcomes = explore(to_program(expr))
    assert [outcome.return_value for outcome in outcomes] == [3, 2, 2, 1, 2, 1, 1, 0]
    posterior = infer(to_program(expr))
    assert posterior[1] == pytest.approx(3 / 8)
    assert posterior[3] == pytest.approx(1 / 8)


def test_sample_in_operands():
    outcomes = explore(to_program(plus(FLIP, FLIP)))
    assert [outcome.return_value for outcome in outcomes] == [2, 1, 1, 0]


def test_condition():
    expr = LetExpr("a", FLIP, LetExpr("b", FLIP, LetExpr(
        "_", ConditionExpr(BinopExpr(Binop.OR, VarExpr("a"), VarExpr("b"))),
        plus(VarExpr("a"), VarExpr("b")))))
    posterior = infer(to_program(expr))
    assert posterior[2] == pytest.approx(1 / 3)
    assert posterior[1] == pytest.approx(2 / 3)
    assert 0 not in posterior


@pytest.mark.parametrize('operator,lhs,expected', [(Binop.OR, 1, 1), (Binop.OR, 0, "rhs"),
                                                   (Binop.AND, 0, 0), (Binop.AND, 1, "rhs")])
def test_short_circuit(operator, lhs, expected):
    # the right operand would fail if it was evaluated
    rhs = LitExpr("rhs") if expected == "rhs" else VarExpr("undefined")
    program = to_program(BinopExpr(operator, LitExpr(lhs), rhs))
    assert explore(program)[0].return_value == expected


def test_observe():
    expr = LetExpr("coin", SampleExpr("categorical", [LitExpr(["fair", "biased"])]), LetExpr(
        "_", ObserveExpr("bernoulli",
                         [IfExpr(BinopExpr(Binop.EQ, VarExpr("coin"), LitExpr("fair")), LitExpr("1/2"),
                                 LitExpr("9/10"))],
                         LitExpr(1)),
        VarExpr("coin")))
    posterior = infer(to_program(expr))
    assert posterior["fair"] == pytest.approx(0.25 / 0.7)


def test_factor():
    expr = LetExpr("a", FLIP, LetExpr(
        "_", FactorExpr(IfExpr(BinopExpr(Binop.EQ, VarExpr("a"), LitExpr(1)), LitExpr(math.log(3)), LitExpr(0.0))),
        VarExpr("a")))
    assert infer(to_program(expr))[1] == pytest.approx(0.75)


def test_recursive_function():
    # flips a coin until the first head, giving up after three tails
    body = IfExpr(BinopExpr(Binop.GEQ, VarExpr("n"), LitExpr(3)),
                  VarExpr("n"),
                  IfExpr(BinopExpr(Binop.EQ, FLIP, LitExpr(1)),
                         VarExpr("n"),
                         CallExpr(VarExpr("geo"), [plus(VarExpr("n"), LitExpr(1))])))
    expr = LetExpr("geo", LambdaExpr(["n"], body), CallExpr(VarExpr("geo"), [LitExpr(0)]))
    posterior = infer(to_program(expr))
    assert dict(posterior) == pytest.approx({0: 1 / 2, 1: 1 / 4, 2: 1 / 8, 3: 1 / 8})


def test_lambda_value():
    program = to_program(LambdaExpr(["x"], VarExpr("x")))
    [outcome] = explore(program)
    assert isinstance(outcome.return_value, Closure)


def test_python_function_from_environment():
    program = to_program(CallExpr(VarExpr("double"), [FLIP]), {"double": lambda x: 2 * x})
    assert dict(infer(program)) == pytest.approx({2: 0.5, 0: 0.5})


def test_negation():
    program = to_program(UnopExpr(Unop.NEG, FLIP))
    assert [outcome.return_value for outcome in explore(program)] == [-1, 0]
    assert explore(to_program(UnopExpr(Unop.NOT, LitExpr(0))))[0].return_value is True


def test_unbound_variable():
    with pytest.raises(NameError):
        explore(to_program(VarExpr("x")))


def test_wrong_arity():
    expr = LetExpr("f", LambdaExpr(["x", "y"], VarExpr("x")), CallExpr(VarExpr("f"), [LitExpr(1)]))
    with pytest.raises(TypeError):
        explore(to_program(expr))


def test_not_callable():
    with pytest.raises(TypeError):
        explore(to_program(CallExpr(LitExpr(3), [])))


def test_unknown_distribution():
    with pytest.raises(DomainError):
        explore(to_program(SampleExpr("poisson", [LitExpr(2)])))


def test_not_an_expression():
    with pytest.raises(TypeError):
        cps_transform(42)


def test_str():
    expr = LetExpr("a", FLIP, IfExpr(VarExpr("a"), plus(VarExpr("a"), LitExpr(1)), LitExpr(0)))
    assert str(expr) == "let a = bernoulli('1/2') in if a then a + 1 else 0"
    assert str(ObserveExpr("bernoulli", [LitExpr("1/2")], LitExpr(1))) == "observe(bernoulli('1/2'), 1)"
    assert str(UnopExpr(Unop.NEG, VarExpr("x"))) == "-x"
