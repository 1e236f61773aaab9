import math
from fractions import Fraction

import pytest
import sympy

from pathwise.distribution import (Bernoulli, Binomial, Categorical, Dirac, DiscreteUniform, Distributions,
                                   FiniteDistribution)
from pathwise.inference.exceptions import DomainError


class TestBernoulli:
    @pytest.mark.parametrize('p', ["1/4", 0.25, Fraction(1, 4), sympy.Rational(1, 4)])
    def test_parameter_formats(self, p):
        dist = Bernoulli(p)
        assert dist.support() == (0, 1)
        assert dist.score(1) == pytest.approx(math.log(0.25))
        assert dist.score(0) == pytest.approx(math.log(0.75))

    def test_exact_probabilities(self):
        dist = Bernoulli("1/3")
        assert dist.exact_probability(1) == sympy.Rational(1, 3)
        assert dist.exact_probability(0) == sympy.Rational(2, 3)

    @pytest.mark.parametrize('p,support', [(0, (0,)), (1, (1,)), ("0", (0,))])
    def test_degenerate_parameter_drops_impossible_values(self, p, support):
        dist = Bernoulli(p)
        assert dist.support() == support
        assert dist.score(support[0]) == 0
        with pytest.raises(DomainError):
            dist.score(1 - support[0])

    @pytest.mark.parametrize('p', [-0.1, "3/2", "p", "nan", "oo", True, [0.5], "1/"])
    def test_invalid_parameter(self, p):
        with pytest.raises(DomainError):
            Bernoulli(p)


class TestCategorical:
    def test_uniform_by_default(self):
        dist = Categorical(["a", "b", "c", "d"])
        assert dist.support() == ("a", "b", "c", "d")
        for value in dist:
            assert dist.probability(value) == pytest.approx(0.25)

    def test_explicit_probabilities(self):
        dist = Categorical(["a", "b", "c"], ["1/2", "1/3", "1/6"])
        assert [dist.exact_probability(v) for v in dist] == \
            [sympy.Rational(1, 2), sympy.Rational(1, 3), sympy.Rational(1, 6)]
        assert sum(dist.probability(v) for v in dist) == pytest.approx(1)

    def test_float_probabilities_up_to_rounding(self):
        dist = Categorical([1, 2, 3], [0.1, 0.2, 0.7])
        assert dist.probability(3) == pytest.approx(0.7)

    def test_zero_probability_values_are_not_in_support(self):
        dist = Categorical(["x", "y", "z"], ["1/2", 0, "1/2"])
        assert dist.support() == ("x", "z")
        assert "y" not in dist
        assert len(dist) == 2

    def test_unhashable_values(self):
        dist = Categorical([[1, 2], [3]], ["1/4", "3/4"])
        assert [3] in dist
        assert dist.probability([3]) == pytest.approx(0.75)

    @pytest.mark.parametrize('values,probabilities', [
        ([], None),
        (["a", "b"], ["1/2", "1/3"]),
        (["a", "b"], ["1/2"]),
        (["a", "a"], ["1/2", "1/2"]),
        ([[1], [1]], None),
        (["a", "b"], ["3/2", "-1/2"]),
        (["a"], [0]),
    ])
    def test_invalid(self, values, probabilities):
        with pytest.raises(DomainError):
            Categorical(values, probabilities)


class TestDiscreteUniform:
    def test_range(self):
        dist = DiscreteUniform(2, 5)
        assert dist.support() == (2, 3, 4, 5)
        assert dist.exact_probability(4) == sympy.Rational(1, 4)

    def test_single_value(self):
        assert DiscreteUniform("3", "3").support() == (3,)

    @pytest.mark.parametrize('start,end', [(5, 2), (0, "1/2"), ("a", 3)])
    def test_invalid(self, start, end):
        with pytest.raises(DomainError):
            DiscreteUniform(start, end)


class TestBinomial:
    def test_probabilities(self):
        dist = Binomial(3, "1/2")
        assert dist.support() == (0, 1, 2, 3)
        assert [dist.exact_probability(k) for k in dist] == \
            [sympy.Rational(1, 8), sympy.Rational(3, 8), sympy.Rational(3, 8), sympy.Rational(1, 8)]

    def test_certain_success(self):
        assert Binomial(4, 1).support() == (4,)

    def test_no_trials(self):
        assert Binomial(0, "1/3").support() == (0,)

    @pytest.mark.parametrize('n,p', [(-1, "1/2"), ("5/2", "1/2"), (3, 2)])
    def test_invalid(self, n, p):
        with pytest.raises(DomainError):
            Binomial(n, p)


def test_dirac():
    dist = Dirac("rain")
    assert dist.support() == ("rain",)
    assert dist.score("rain") == 0
    with pytest.raises(DomainError):
        dist.score("sun")


def test_scores_are_finite_and_non_positive():
    for dist in [Bernoulli("1/7"), Categorical(range(5)), DiscreteUniform(0, 9), Binomial(6, "2/5")]:
        for value in dist.support():
            assert -math.inf < dist.score(value) <= 0


def test_equality():
    assert Bernoulli("1/2") != Categorical([0, 1])
    assert Bernoulli("1/2") != Bernoulli("1/3")
    assert Binomial(1, "1/2") != Bernoulli("1/2")
    assert Bernoulli("1/2") == Bernoulli(Fraction(1, 2))


def test_tiny_probabilities_have_finite_scores():
    binomial = Binomial(1100, "1/2")
    assert all(math.isfinite(binomial.score(k)) for k in binomial.support())
    assert binomial.score(0) == pytest.approx(-1100 * math.log(2))
    rare = Categorical(["rare", "common"], ["1/10**400", "1 - 1/10**400"])
    assert rare.score("rare") == pytest.approx(-400 * math.log(10))
    assert rare.score("common") == pytest.approx(0.0)


def test_str():
    assert str(Bernoulli("1/4")) == "bernoulli{0: 0.75, 1: 0.25}"


class TestFactory:
    def test_constructors(self):
        assert Distributions.bernoulli("1/2") == Bernoulli("1/2")
        assert Distributions.binomial(2, "1/3") == Binomial(2, "1/3")
        assert Distributions.uniform(1, 6) == DiscreteUniform(1, 6)
        assert Distributions.categorical("ab") == Categorical("ab")
        assert Distributions.dirac(7) == Dirac(7)

    @pytest.mark.parametrize('name,params,expected', [
        ("bernoulli", ("1/2",), Bernoulli("1/2")),
        ("flip", ("1/2",), Bernoulli("1/2")),
        ("unif_d", (0, 3), DiscreteUniform(0, 3)),
        ("categorical", (["a", "b"], ["1/4", "3/4"]), Categorical(["a", "b"], ["1/4", "3/4"])),
    ])
    def test_from_name(self, name, params, expected):
        dist = Distributions.from_name(name, *params)
        assert isinstance(dist, FiniteDistribution)
        assert dist == expected

    def test_unknown_name(self):
        with pytest.raises(DomainError):
            Distributions.from_name("poisson", 3)

    def test_wrong_number_of_parameters(self):
        with pytest.raises(DomainError, match="Wrong number of parameters"):
            Distributions.from_name("binomial", 3)

    def test_invalid_parameter_keeps_its_message(self):
        with pytest.raises(DomainError, match="Invalid parameters for categorical"):
            Distributions.from_name("categorical", 5)

    def test_names(self):
        assert {"bernoulli", "categorical", "uniform", "binomial", "dirac"} <= set(Distributions.names())
