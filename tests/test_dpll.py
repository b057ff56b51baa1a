import itertools
import random
import sys

import pytest

from putnam.solvers.dpll import (
    RECURSION_HEADROOM, UNSAT, DpllSolver, Satisfiable, Unsatisfiable, choose_variable, is_satisfied,
    solve,
)
from putnam.solvers.model import Model
from putnam.solvers.types import Lit, Val, from_dimacs
from putnam.utils.exceptions import InvalidClauseError
from putnam.utils.generators import chain, pigeonhole, random_ksat, simple_sat

STRATEGIES = [
    {"propagation": propagation, "backtracking": backtracking}
    for propagation in DpllSolver.PROPAGATION_STRATEGIES
    for backtracking in DpllSolver.BACKTRACKING_STRATEGIES
]
ALL_STRATEGIES = pytest.mark.parametrize(
    "options", STRATEGIES, ids=lambda o: f"{o['propagation']}-{o['backtracking']}")


def brute_force_sat(formula, num_vars):
    for bits in itertools.product((False, True), repeat=num_vars):
        if all(any(bits[lit.var] != lit.neg for lit in clause) for clause in formula):
            return True
    return False


def random_formula(rng, num_vars, num_clauses, max_width=4):
    formula = []
    for _ in range(num_clauses):
        width = rng.randint(1, max_width)
        formula.append([Lit(rng.randrange(num_vars), rng.random() < 0.5) for _ in range(width)])
    return formula


def assert_model_satisfies(formula, result):
    assert isinstance(result, Satisfiable)
    for clause in formula:
        assert any(result.model.is_true(lit) for lit in clause), clause


@ALL_STRATEGIES
def test_units(options):
    formula, n = from_dimacs([[1], [-2]])
    result = solve(formula, n, **options)
    assert result.satisfiable
    assert result.model.value(0) is Val.TRUE
    assert result.model.value(1) is Val.FALSE


@ALL_STRATEGIES
def test_contradicting_units(options):
    formula, n = from_dimacs([[1], [-1]])
    assert solve(formula, n, **options) == UNSAT


@ALL_STRATEGIES
def test_simple_sat(options):
    formula, n = simple_sat()
    assert_model_satisfies(formula, solve(formula, n, **options))


@ALL_STRATEGIES
@pytest.mark.parametrize("n", [0, 1, 5])
def test_empty_formula_is_satisfiable(options, n):
    result = solve([], n, **options)
    assert result.satisfiable
    assert all(result.model.value(v) is Val.UNDEF for v in range(n))


@ALL_STRATEGIES
@pytest.mark.parametrize("others", [[], [[1, 2]], [[1], [-2, 3], [2]]])
def test_empty_clause_is_unsatisfiable(options, others):
    formula, n = from_dimacs(others + [[]], num_vars=3)
    assert solve(formula, n, **options) == UNSAT


@ALL_STRATEGIES
@pytest.mark.parametrize("holes", [1, 2, 3, 4])
def test_pigeonhole_is_unsatisfiable(options, holes):
    formula, n = pigeonhole(holes)
    assert isinstance(solve(formula, n, **options), Unsatisfiable)


@ALL_STRATEGIES
@pytest.mark.parametrize("length", [2, 3, 10, 30])
def test_chain_is_satisfiable(options, length):
    formula, n = chain(length)
    assert_model_satisfies(formula, solve(formula, n, **options))


@ALL_STRATEGIES
def test_planted_random_3sat_is_satisfiable(options):
    for seed in range(5):
        formula, n = random_ksat(30, 120, seed=seed, planted=True)
        assert_model_satisfies(formula, solve(formula, n, **options))


@ALL_STRATEGIES
def test_agrees_with_truth_table(options):
    rng = random.Random(1234)
    for _ in range(150):
        num_vars = rng.randint(1, 8)
        formula = random_formula(rng, num_vars, rng.randint(1, 5 * num_vars))
        result = solve(formula, num_vars, **options)
        assert result.satisfiable == brute_force_sat(formula, num_vars)
        if result.satisfiable:
            assert_model_satisfies(formula, result)


def test_agrees_with_truth_table_at_twelve_variables():
    rng = random.Random(99)
    for _ in range(10):
        formula, n = random_ksat(12, rng.randint(40, 60), seed=rng.randrange(10 ** 6))
        assert solve(formula, n).satisfiable == brute_force_sat(formula, n)


def test_repeated_solves_are_identical():
    formula, n = random_ksat(40, 150, seed=7, planted=True)
    first = solve(formula, n)
    second = solve(formula, n)
    assert first.model.trail == second.model.trail
    assert first.model.values() == second.model.values()


def test_copy_and_undo_backtracking_give_identical_models():
    for seed in range(5):
        formula, n = random_ksat(25, 100, seed=seed, planted=True)
        copied = solve(formula, n, backtracking="copy")
        undone = solve(formula, n, backtracking="undo")
        assert copied == undone


def test_all_strategies_give_the_same_assignment():
    for seed in range(5):
        formula, n = random_ksat(25, 100, seed=seed)
        results = [solve(formula, n, **options) for options in STRATEGIES]
        assert len({r.satisfiable for r in results}) == 1
        if results[0].satisfiable:
            assert len({r.model.values() for r in results}) == 1


def test_unconstrained_variables_stay_undefined():
    # variable 2 appears nowhere
    formula, _ = from_dimacs([[1, 2]])
    result = solve(formula, 3)
    assert result.satisfiable
    assert result.model.value(0) is Val.TRUE
    assert result.model.value(2) is Val.UNDEF


def test_true_is_tried_before_false():
    formula, n = from_dimacs([[1, 2], [-1, -2]])
    result = solve(formula, n)
    assert result.model.value(0) is Val.TRUE
    assert result.model.value(1) is Val.FALSE
    assert result.model.trail == (0, 1)


def test_false_branch_after_failed_true_branch():
    # x1 forces a contradiction, so the search must settle on -x1
    formula, n = from_dimacs([[1, 2], [-1, 3], [-1, -3]])
    solver = DpllSolver(formula, n)
    result = solver.solve()
    assert result.model.value(0) is Val.FALSE
    assert result.model.value(1) is Val.TRUE
    assert solver.decisions == 1
    assert solver.conflicts == 1


def test_counters():
    formula, n = pigeonhole(2)
    solver = DpllSolver(formula, n)
    assert solver.solve() == UNSAT
    assert solver.decisions > 0
    assert solver.conflicts > solver.decisions
    assert solver.propagations > 0

    # counters restart on every solve
    decisions = solver.decisions
    solver.solve()
    assert solver.decisions == decisions


def test_solving_leaves_the_formula_untouched():
    formula, n = random_ksat(20, 80, seed=3)
    snapshot = [list(clause) for clause in formula]
    for options in STRATEGIES:
        solve(formula, n, **options)
    assert formula == snapshot


def test_deep_search_does_not_hit_the_recursion_limit():
    # independent clauses (x1 v x2) (x3 v x4) ... each need their own decision
    formula, n = from_dimacs([[2 * i + 1, 2 * i + 2] for i in range(1200)])
    solver = DpllSolver(formula, n, propagation="watched", backtracking="undo")
    assert solver.solve().satisfiable
    assert solver.decisions == 1200
    assert sys.getrecursionlimit() >= n + RECURSION_HEADROOM


def test_is_satisfied():
    formula, n = from_dimacs([[1, 2], [-1]])
    model = Model(n)
    assert not is_satisfied(formula, model)
    model.assign(0, Val.FALSE)
    assert not is_satisfied(formula, model)
    model.assign(1, Val.TRUE)
    assert is_satisfied(formula, model)
    assert is_satisfied([], Model(0))
    assert not is_satisfied([[]], Model(0))


def test_choose_variable_scans_first_open_clause():
    formula, n = from_dimacs([[1, 2], [3, -4, 2], [4]])
    model = Model(n)
    assert choose_variable(formula, model) == 0

    model.assign(0, Val.TRUE)
    assert choose_variable(formula, model) == 2

    model.assign(2, Val.FALSE)
    assert choose_variable(formula, model) == 3


def test_choose_variable_without_candidates():
    formula, n = from_dimacs([[1], [-2]])
    model = Model(n)
    model.assign(0, Val.FALSE)
    model.assign(1, Val.TRUE)
    assert choose_variable(formula, model) is None
    assert choose_variable([[]], Model(0)) is None


def test_invalid_options_are_rejected():
    with pytest.raises(ValueError, match="Propagation"):
        DpllSolver([], 0, propagation="vsids")
    with pytest.raises(ValueError, match="Backtracking"):
        DpllSolver([], 0, backtracking="backjump")


def test_out_of_range_variables_are_rejected():
    with pytest.raises(InvalidClauseError):
        solve([[Lit(3)]], 3)
    with pytest.raises(ValueError):
        solve([], -1)


def test_result_types():
    assert UNSAT == Unsatisfiable()
    assert not UNSAT.satisfiable
    assert UNSAT.model is None
    model = Model(1)
    assert Satisfiable(model) == Satisfiable(Model(1))
    assert Satisfiable(model) != UNSAT
    assert repr(UNSAT) == "Unsatisfiable()"
