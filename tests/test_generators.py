import itertools

import pytest

from putnam.utils.generators import chain, pigeonhole, random_ksat, simple_sat


def test_simple_sat_shape():
    formula, num_vars = simple_sat()
    assert num_vars == 3
    assert len(formula) == 3


@pytest.mark.parametrize("n", [1, 2, 5])
def test_pigeonhole_shape(n):
    formula, num_vars = pigeonhole(n)
    assert num_vars == (n + 1) * n
    # one clause per pigeon plus one per pair of pigeons per hole
    assert len(formula) == (n + 1) + n * (n + 1) * n // 2
    assert all(0 <= lit.var < num_vars for clause in formula for lit in clause)


def test_chain_shape():
    formula, num_vars = chain(5)
    assert num_vars == 5
    assert len(formula) == 1 + 2 * 3
    assert chain(2) == ([formula[0]], 2)


def test_invalid_sizes():
    with pytest.raises(ValueError):
        pigeonhole(0)
    with pytest.raises(ValueError):
        chain(1)
    with pytest.raises(ValueError):
        random_ksat(2, 5, k=3)


def test_random_ksat_is_reproducible():
    first = random_ksat(20, 50, seed=11)
    assert first == random_ksat(20, 50, seed=11)
    formula, num_vars = first
    assert num_vars == 20
    assert len(formula) == 50
    for clause in formula:
        assert len(clause) == 3
        assert len({lit.var for lit in clause}) == 3


def test_planted_formula_has_a_common_model():
    formula, num_vars = random_ksat(15, 200, seed=5, planted=True)
    assert any(
        all(any(bits[lit.var] != lit.neg for lit in clause) for clause in formula)
        for bits in itertools.product((False, True), repeat=num_vars)
    )
