"""
Unit propagation.

A clause is unit when none of its literals is true and exactly one literal is
still undefined: that literal is forced. Propagation repeats this until no
clause is unit (success) or some clause has every literal false (conflict).
The fixed point does not depend on processing order; the variable named by a
conflict may.

Two propagators share that contract:
    unit_propagate:    re-scans the whole formula after every assignment
    WatchedPropagator: two watched literals per clause, only clauses watching a
                       newly falsified literal are visited
"""
import logging
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional

from putnam.solvers.model import Model
from putnam.solvers.types import Conflict, Formula, Lit, Val

logger = logging.getLogger(__name__)


def _scan(formula: Formula, model: Model, queue: Deque[Lit]) -> bool:
    """Queue the open literal of every unit clause; return False on a falsified clause."""
    for clause in formula:
        if any(model.is_true(lit) for lit in clause):
            continue
        # duplicated literals count once
        open_lits = list(dict.fromkeys(lit for lit in clause if model.value(lit.var) is Val.UNDEF))
        if not open_lits:
            return False
        if len(open_lits) == 1:
            queue.append(open_lits[0])
    return True


def unit_propagate(formula: Formula, model: Model) -> Optional[Conflict]:
    """
    Force every implied assignment into `model`.

    The queue is seeded from the clauses that are unit under the current
    assignment, which on a fresh model are exactly the one-literal clauses.

    Parameters:
        formula: the clauses, read only
        model: assignment state, extended in place

    Return:
        None once a fixed point is reached, or the Conflict that stopped it.
        Assignments made before a conflict are left in `model`.
    """
    queue: Deque[Lit] = deque()
    if not _scan(formula, model, queue):
        # falsified before anything was assigned here, e.g. an empty clause
        return Conflict(model.trail_at(model.trail_size - 1) if model.trail_size else None)

    while queue:
        lit = queue.popleft()
        if model.value(lit.var) is not Val.UNDEF:
            if model.is_true(lit):
                continue
            return Conflict(lit.var)
        model.assign(lit.var, lit.satisfying_value)
        if not _scan(formula, model, queue):
            return Conflict(lit.var)
    return None


class WatchedPropagator:
    """
    Unit propagation over two watched literals per clause.

    Each clause with two or more distinct literals keeps its watches at
    positions 0 and 1 of a private copy of its literals. A clause only needs
    attention when one of its watches becomes false, so each assignment visits
    the clauses watching its falsified literal instead of the whole formula.
    Watches never need repair on backtracking, which lets one propagator serve
    every model copy of a search.

    One-literal clauses are kept aside and re-checked on every call; an empty
    clause makes every call fail.
    """

    def __init__(self, formula: Formula):
        self._clauses: List[List[Lit]] = []
        self._units: List[Lit] = []
        self._has_empty = False
        self._watches: Dict[Lit, List[int]] = defaultdict(list)

        for clause in formula:
            lits = list(dict.fromkeys(clause))
            if not lits:
                self._has_empty = True
            elif len(lits) == 1:
                self._units.append(lits[0])
            else:
                idx = len(self._clauses)
                self._clauses.append(lits)
                self._watches[lits[0]].append(idx)
                self._watches[lits[1]].append(idx)

        logger.debug("Watching %d clauses, %d unit clauses",
                     len(self._clauses), len(self._units))

    def propagate(self, model: Model) -> Optional[Conflict]:
        '''
        Same contract as unit_propagate. Every trail entry from `model.qhead`
        onwards is processed and the head is advanced past it.
        '''
        if self._has_empty:
            return Conflict()

        for lit in self._units:
            if model.value(lit.var) is Val.UNDEF:
                model.assign(lit.var, lit.satisfying_value)
            elif not model.is_true(lit):
                return Conflict(lit.var)

        while model.qhead < model.trail_size:
            var = model.trail_at(model.qhead)
            model.qhead += 1
            conflict = self._visit(model, Lit(var, model.value(var) is Val.TRUE))
            if conflict is not None:
                return conflict
        return None

    def _visit(self, model: Model, false_lit: Lit) -> Optional[Conflict]:
        '''Revisit the clauses watching `false_lit`, which just became false.'''
        watchers = self._watches[false_lit]
        kept = []
        for pos, idx in enumerate(watchers):
            lits = self._clauses[idx]
            if lits[0] == false_lit:
                lits[0], lits[1] = lits[1], lits[0]
            first = lits[0]
            if model.is_true(first):
                kept.append(idx)
                continue

            for k in range(2, len(lits)):
                if not model.is_false(lits[k]):
                    lits[1], lits[k] = lits[k], lits[1]
                    self._watches[lits[1]].append(idx)
                    break
            else:
                kept.append(idx)
                if model.is_false(first):
                    kept.extend(watchers[pos + 1:])
                    self._watches[false_lit] = kept
                    return Conflict(false_lit.var)
                model.assign(first.var, first.satisfying_value)

        self._watches[false_lit] = kept
        return None
