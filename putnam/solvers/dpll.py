"""
DPLL search: unit propagation plus chronological branch-and-backtrack.

Each search node propagates, stops if every clause is satisfied, and otherwise
branches on the first undefined variable of the first unsatisfied clause,
trying True before False. Given the same formula the search is fully
deterministic.
"""
import logging
import sys
from typing import Optional

from putnam.solvers.model import Model
from putnam.solvers.types import Conflict, Formula, Val, Var, validate_formula
from putnam.solvers.unit import WatchedPropagator, unit_propagate

logger = logging.getLogger(__name__)

# Frames kept free on top of the search depth, which is at most num_vars.
RECURSION_HEADROOM = 1000


class SolveResult:
    """Outcome of a solve call: either Satisfiable(model) or Unsatisfiable."""
    satisfiable = False
    model: Optional[Model] = None


class Satisfiable(SolveResult):
    """
    The formula is satisfiable and `model` satisfies every clause.

    Variables left UNDEF in `model` are unconstrained, not False.
    """
    satisfiable = True

    def __init__(self, model: Model):
        self.model = model

    def __eq__(self, other):
        if not isinstance(other, Satisfiable):
            return NotImplemented
        return self.model == other.model

    def __repr__(self):
        return f"Satisfiable({self.model!r})"


class Unsatisfiable(SolveResult):

    def __eq__(self, other):
        return isinstance(other, Unsatisfiable)

    def __hash__(self):
        return hash(Unsatisfiable)

    def __repr__(self):
        return "Unsatisfiable()"


UNSAT = Unsatisfiable()


def is_satisfied(formula: Formula, model: Model) -> bool:
    """True if every clause has at least one true literal under `model`."""
    return all(any(model.is_true(lit) for lit in clause) for clause in formula)


def choose_variable(formula: Formula, model: Model) -> Optional[Var]:
    """
    First undefined variable of the first unsatisfied clause, in formula order.

    Returns None when no unsatisfied clause has an undefined variable left.
    """
    for clause in formula:
        if any(model.is_true(lit) for lit in clause):
            continue
        for lit in clause:
            if model.value(lit.var) is Val.UNDEF:
                return lit.var
    return None


class DpllSolver:
    """
    DPLL solver over a formula of `Lit` clauses.

    Propagation strategies:
      - "rescan":  re-scan every clause after each forced assignment
      - "watched": two watched literals per clause

    Backtracking strategies:
      - "copy": duplicate the model at every branch, the True branch works on
                the copy and the False branch reuses the original
      - "undo": one model, undone along the trail when a branch fails

    Every combination gives the same verdict and the same final assignment.

    Public Methods:
        solve(): returns Satisfiable(model) or UNSAT
    """

    PROPAGATION_STRATEGIES = ["rescan", "watched"]
    BACKTRACKING_STRATEGIES = ["copy", "undo"]

    def __init__(self, formula: Formula, num_vars: int,
                 propagation: str = "rescan", backtracking: str = "copy"):
        '''
        Parameters:
            formula: list of clauses, each a list of Lit; never modified
            num_vars: number of variables, greater than every referenced variable
            propagation: one of PROPAGATION_STRATEGIES
            backtracking: one of BACKTRACKING_STRATEGIES

        Raises:
            ValueError: unknown strategy or negative num_vars
            InvalidClauseError: a literal outside [0, num_vars)
        '''
        if propagation not in self.PROPAGATION_STRATEGIES:
            raise ValueError(f"Propagation must be one of {self.PROPAGATION_STRATEGIES}")
        if backtracking not in self.BACKTRACKING_STRATEGIES:
            raise ValueError(f"Backtracking must be one of {self.BACKTRACKING_STRATEGIES}")
        validate_formula(formula, num_vars)

        self.formula = formula
        self.num_vars = num_vars
        self.propagation = propagation
        self.backtracking = backtracking
        self._propagator: Optional[WatchedPropagator] = None

        self.decisions = 0     # branch points
        self.conflicts = 0     # failed propagations
        self.propagations = 0  # forced assignments

    def solve(self) -> SolveResult:
        self.decisions = self.conflicts = self.propagations = 0
        if self.propagation == "watched":
            self._propagator = WatchedPropagator(self.formula)

        depth = self.num_vars + RECURSION_HEADROOM
        if sys.getrecursionlimit() < depth:
            sys.setrecursionlimit(depth)

        model = Model(self.num_vars)
        if self.backtracking == "copy":
            model = self._search(model)
        elif not self._search_undo(model):
            model = None

        logger.info("%s after %d decisions, %d conflicts, %d propagations",
                    "SAT" if model is not None else "UNSAT",
                    self.decisions, self.conflicts, self.propagations)
        if model is None:
            return UNSAT
        return Satisfiable(model)

    def _propagate(self, model: Model) -> Optional[Conflict]:
        before = model.trail_size
        if self._propagator is None:
            conflict = unit_propagate(self.formula, model)
        else:
            conflict = self._propagator.propagate(model)
        self.propagations += model.trail_size - before
        if conflict is not None:
            self.conflicts += 1
            logger.debug("Conflict on variable %s at trail size %d", conflict.var, model.trail_size)
        return conflict

    def _branch_variable(self, model: Model) -> Optional[Var]:
        var = choose_variable(self.formula, model)
        if var is None:
            # propagation should have caught this; fail the branch regardless
            logger.debug("No undefined variable left in unsatisfied clauses")
            return None
        self.decisions += 1
        logger.debug("Decision %d: branching on variable %d", self.decisions, var)
        return var

    def _search(self, model: Model) -> Optional[Model]:
        '''Copy-per-branch search. Returns the satisfying model or None.'''
        if self._propagate(model) is not None:
            return None
        if is_satisfied(self.formula, model):
            return model
        var = self._branch_variable(model)
        if var is None:
            return None

        trial = model.copy()
        trial.assign(var, Val.TRUE)
        result = self._search(trial)
        if result is not None:
            return result

        # the True attempt only touched `trial`
        model.assign(var, Val.FALSE)
        return self._search(model)

    def _search_undo(self, model: Model) -> bool:
        '''Single-model search. On success `model` holds the answer.'''
        if self._propagate(model) is not None:
            return False
        if is_satisfied(self.formula, model):
            return True
        var = self._branch_variable(model)
        if var is None:
            return False

        mark = model.trail_size
        model.assign(var, Val.TRUE)
        if self._search_undo(model):
            return True

        model.backtrack(mark)
        model.assign(var, Val.FALSE)
        return self._search_undo(model)


def solve(formula: Formula, num_vars: int, **options) -> SolveResult:
    """
    Decide satisfiability of `formula` over variables [0, num_vars).

    Parameters:
        formula: list of clauses, each a list of Lit
        num_vars: number of variables
        options: `propagation` and `backtracking` strategies of DpllSolver

    Return:
        Satisfiable(model) or UNSAT
    """
    return DpllSolver(formula, num_vars, **options).solve()
