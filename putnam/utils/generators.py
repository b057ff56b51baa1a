"""
Instance families for tests and benchmarks.

Every generator returns (formula, num_vars) in the solver's Lit representation.
"""
from typing import Optional, Tuple

import numpy as np

from putnam.solvers.types import Formula, Lit


def simple_sat() -> Tuple[Formula, int]:
    # (x0 v x1) & (-x0 v x2) & (-x1 v -x2)
    formula = [
        [Lit(0), Lit(1)],
        [Lit(0, True), Lit(2)],
        [Lit(1, True), Lit(2, True)],
    ]
    return formula, 3


def pigeonhole(n: int) -> Tuple[Formula, int]:
    """
    n+1 pigeons in n holes, unsatisfiable for every n >= 1.

    Variable pigeon * n + hole means "pigeon sits in hole".
    """
    if n < 1:
        raise ValueError(f"Need at least one hole, got {n}")
    formula = []
    for pigeon in range(n + 1):
        formula.append([Lit(pigeon * n + hole) for hole in range(n)])
    for hole in range(n):
        for p1 in range(n + 1):
            for p2 in range(p1 + 1, n + 1):
                formula.append([Lit(p1 * n + hole, True), Lit(p2 * n + hole, True)])
    return formula, (n + 1) * n


def chain(n: int) -> Tuple[Formula, int]:
    """(x0 v x1) followed by the implications xi -> x(i+2) and x(i+1) -> x(i+2)."""
    if n < 2:
        raise ValueError(f"A chain needs at least 2 variables, got {n}")
    formula = [[Lit(0), Lit(1)]]
    for i in range(n - 2):
        formula.append([Lit(i, True), Lit(i + 2)])
        formula.append([Lit(i + 1, True), Lit(i + 2)])
    return formula, n


def random_ksat(num_vars: int, num_clauses: int, k: int = 3,
                seed: Optional[int] = None, planted: bool = False) -> Tuple[Formula, int]:
    """
    Uniform random k-CNF with k distinct variables per clause.

    Args:
        num_vars: number of variables (at least k)
        num_clauses: number of clauses
        k: literals per clause
        seed: seed for numpy's default generator
        planted: if True, every clause is satisfied by a hidden random
            assignment, so the formula is guaranteed satisfiable

    Returns:
        (formula, num_vars)
    """
    if num_vars < k:
        raise ValueError(f"Need at least {k} variables for {k}-SAT, got {num_vars}")
    rng = np.random.default_rng(seed)
    hidden = rng.integers(0, 2, size=num_vars).astype(bool)

    formula = []
    for _ in range(num_clauses):
        variables = rng.choice(num_vars, size=k, replace=False)
        negs = rng.integers(0, 2, size=k).astype(bool)
        if planted and all(negs[i] == hidden[v] for i, v in enumerate(variables)):
            # flip one literal so the hidden assignment satisfies the clause
            pick = int(rng.integers(0, k))
            negs[pick] = not negs[pick]
        formula.append([Lit(int(v), bool(neg)) for v, neg in zip(variables, negs)])
    return formula, num_vars
