from typing import List, Tuple

from putnam.solvers.types import Lit, Val, Var
from putnam.utils.exceptions import InconsistentAssignmentError


class Model:
    """
    Partial truth assignment plus the chronological trail of assigned variables.

    A model is sized once, with every variable UNDEF. In a satisfiable result a
    variable that is still UNDEF is unconstrained: either polarity satisfies
    the formula, so UNDEF must not be read as False.

    Attributes:
        qhead: number of trail entries the watched-literal propagator has
            already processed
    """
    __slots__ = ['_vals', '_trail', 'qhead']

    def __init__(self, num_vars: int):
        '''
        Parameters:
            num_vars: number of variables, all initially UNDEF
        '''
        if num_vars < 0:
            raise ValueError(f"num_vars must be non-negative, got {num_vars}")
        self._vals: List[Val] = [Val.UNDEF] * num_vars
        self._trail: List[Var] = []
        self.qhead = 0

    @property
    def num_vars(self) -> int:
        return len(self._vals)

    @property
    def trail(self) -> Tuple[Var, ...]:
        return tuple(self._trail)

    @property
    def trail_size(self) -> int:
        return len(self._trail)

    def trail_at(self, index: int) -> Var:
        return self._trail[index]

    def __len__(self):
        return len(self._vals)

    def value(self, var: Var) -> Val:
        if var < 0:
            raise IndexError(f"Variable {var} out of range")
        return self._vals[var]

    def values(self) -> Tuple[Val, ...]:
        return tuple(self._vals)

    def assign(self, var: Var, val: Val) -> None:
        '''
        Record `val` for `var` and push `var` on the trail.

        Parameters:
            var: an UNDEF variable
            val: Val.TRUE or Val.FALSE

        Raises:
            IndexError: if `var` is negative or not below num_vars
            InconsistentAssignmentError: if `var` already holds a value
        '''
        if val is Val.UNDEF:
            raise ValueError("Cannot assign UNDEF; use backtrack() to unassign")
        if var < 0:
            raise IndexError(f"Variable {var} out of range")
        if self._vals[var] is not Val.UNDEF:
            raise InconsistentAssignmentError(variable=var)
        self._vals[var] = val
        self._trail.append(var)

    def is_true(self, lit: Lit) -> bool:
        val = self._vals[lit.var]
        return val is Val.FALSE if lit.neg else val is Val.TRUE

    def is_false(self, lit: Lit) -> bool:
        val = self._vals[lit.var]
        return val is Val.TRUE if lit.neg else val is Val.FALSE

    def copy(self) -> "Model":
        '''Independent copy of the values, the trail and the propagation head.'''
        other = Model.__new__(Model)
        other._vals = self._vals.copy()
        other._trail = self._trail.copy()
        other.qhead = self.qhead
        return other

    def backtrack(self, mark: int) -> None:
        '''
        Undo every assignment made after trail position `mark`.

        Parameters:
            mark: trail length to return to
        '''
        while len(self._trail) > mark:
            self._vals[self._trail.pop()] = Val.UNDEF
        self.qhead = min(self.qhead, mark)

    def to_dimacs(self, default: bool = True) -> List[int]:
        '''
        Signed 1-based literals for every variable.

        Parameters:
            default: polarity used for UNDEF variables
        '''
        lits = []
        for var, val in enumerate(self._vals):
            positive = default if val is Val.UNDEF else val is Val.TRUE
            lits.append(var + 1 if positive else -(var + 1))
        return lits

    def __eq__(self, other):
        if not isinstance(other, Model):
            return NotImplemented
        return self._vals == other._vals and self._trail == other._trail

    def __repr__(self):
        assigned = len(self._trail)
        return f"Model(num_vars={len(self._vals)}, assigned={assigned})"
