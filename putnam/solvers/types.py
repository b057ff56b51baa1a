"""
Problem representation shared by the solver modules.

Variables are dense integers in [0, num_vars). A literal pairs a variable with
a polarity, a clause is a list of literals (their disjunction) and a formula is
a list of clauses (their conjunction). Formulas are never modified by the
solver.
"""
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from putnam.utils.exceptions import InvalidClauseError

Var = int


class Val(Enum):
    TRUE = "true"
    FALSE = "false"
    UNDEF = "undef"

    @classmethod
    def from_bool(cls, value: bool) -> "Val":
        return cls.TRUE if value else cls.FALSE


class Lit:
    """
    A variable or its negation.

    Attributes:
        var: the variable this literal refers to
        neg: True for the negated variable, False for the variable itself
    """
    __slots__ = ['var', 'neg']

    def __init__(self, var: Var, neg: bool = False):
        object.__setattr__(self, 'var', var)
        object.__setattr__(self, 'neg', neg)

    def __setattr__(self, name, value):
        raise AttributeError("Lit is immutable")

    def __delattr__(self, name):
        raise AttributeError("Lit is immutable")

    def __reduce__(self):
        return Lit, (self.var, self.neg)

    @classmethod
    def from_dimacs(cls, number: int) -> "Lit":
        """Build a literal from a signed, 1-based DIMACS integer."""
        if number == 0:
            raise ValueError("0 is the DIMACS clause terminator, not a literal")
        return cls(abs(number) - 1, number < 0)

    def to_dimacs(self) -> int:
        return -(self.var + 1) if self.neg else self.var + 1

    @property
    def satisfying_value(self) -> Val:
        """The value the variable must take for this literal to be true."""
        return Val.FALSE if self.neg else Val.TRUE

    def __neg__(self) -> "Lit":
        return Lit(self.var, not self.neg)

    def __eq__(self, other):
        if not isinstance(other, Lit):
            return NotImplemented
        return self.var == other.var and self.neg == other.neg

    def __hash__(self):
        return hash((self.var, self.neg))

    def __repr__(self):
        return f"Lit({self.var}, neg={self.neg})"


Clause = List[Lit]
Formula = List[Clause]


class Conflict:
    """
    Outcome of a propagation that reached a contradiction.

    `var` names the variable whose assignment was contradicted, or is None when
    no single variable is to blame (an empty clause).
    """
    __slots__ = ['var']

    def __init__(self, var: Optional[Var] = None):
        self.var = var

    def __repr__(self):
        return f"Conflict(var={self.var})"


def from_dimacs(clauses: Iterable[Iterable[int]], num_vars: Optional[int] = None) -> Tuple[Formula, int]:
    """
    Convert signed integer clauses (1-based) into a formula of literals.

    Parameters:
        clauses: iterable of clauses, each an iterable of non-zero integers
        num_vars: declared variable count; the largest referenced variable wins
            if it is bigger

    Return:
        (formula, num_vars)
    """
    formula = []
    max_var = 0
    for clause in clauses:
        lits = [Lit.from_dimacs(number) for number in clause]
        for lit in lits:
            max_var = max(max_var, lit.var + 1)
        formula.append(lits)
    if num_vars is None or num_vars < max_var:
        num_vars = max_var
    return formula, num_vars


def validate_formula(formula: Formula, num_vars: int) -> None:
    """Reject a formula that references variables outside [0, num_vars)."""
    if num_vars < 0:
        raise ValueError(f"num_vars must be non-negative, got {num_vars}")
    for clause in formula:
        for lit in clause:
            if not 0 <= lit.var < num_vars:
                raise InvalidClauseError(
                    f"Variable {lit.var} outside [0, {num_vars})", clause=clause)
