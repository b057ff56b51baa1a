"""
DIMACS CNF reading and writing.

    c a comment
    p cnf 3 2
    1 -3 0
    2 3 -1 0

Comment lines start with 'c', the 'p cnf <vars> <clauses>' header is optional,
clauses are whitespace separated signed integers terminated by 0 and may span
lines. A line starting with '%' ends the clause data (SATLIB files put a stray
'0' after it).
"""
import gzip
import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from putnam.solvers.types import Formula, from_dimacs
from putnam.utils.exceptions import DimacsParseError

logger = logging.getLogger(__name__)

HEADER = re.compile(r'p\s+cnf\s+(\d+)\s+(\d+)\s*$')
TOKEN = re.compile(r'-?\d+$')


def parse_dimacs(lines: Iterable[str]) -> Tuple[List[List[int]], Optional[int]]:
    """
    Decode DIMACS text into signed integer clauses.

    Parameters:
        lines: the text, line by line

    Return:
        (clauses, declared number of variables or None without a header)

    Raises:
        DimacsParseError: on a malformed header, a non-integer token, or a
            literal beyond the declared variable count
    """
    clauses = []
    header = None
    current = []

    for number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('c'):
            continue
        if line.startswith('%'):
            break
        if line.startswith('p'):
            if header is not None:
                raise DimacsParseError("Multiple problem lines", number)
            match = HEADER.match(line)
            if match is None:
                raise DimacsParseError(f'Invalid problem line: "{line}"', number)
            header = int(match.group(1)), int(match.group(2))
            continue

        for tok in line.split():
            if not TOKEN.match(tok):
                raise DimacsParseError(f'Expected an integer, got "{tok}"', number)
            lit = int(tok)
            if lit == 0:
                clauses.append(current)
                current = []
                continue
            if header is not None and abs(lit) > header[0]:
                raise DimacsParseError(
                    f"Literal {lit} exceeds the declared {header[0]} variables", number)
            current.append(lit)

    if current:
        clauses.append(current)

    if header is None:
        return clauses, None
    num_vars, num_clauses = header
    if len(clauses) != num_clauses:
        logger.warning("Header declares %d clauses, found %d", num_clauses, len(clauses))
    return clauses, num_vars


def read_cnf(path) -> Tuple[Formula, int]:
    """
    Read a DIMACS file (optionally gzip compressed) into a formula of literals.

    Return:
        (formula, num_vars), where num_vars covers every referenced variable
    """
    path = str(path)
    open_fn = gzip.open if path.endswith('.gz') else open
    with open_fn(path, 'rt', encoding='utf-8') as f:
        clauses, declared = parse_dimacs(f)
    formula, num_vars = from_dimacs(clauses, declared)
    logger.debug("Read %s: %d variables, %d clauses", path, num_vars, len(formula))
    return formula, num_vars


def formula_to_dimacs(formula: Formula, num_vars: int, comments: Sequence[str] = ()) -> str:
    lines = [f"c {comment}" for comment in comments]
    lines.append(f"p cnf {num_vars} {len(formula)}")
    for clause in formula:
        lines.append(" ".join([str(lit.to_dimacs()) for lit in clause] + ["0"]))
    return "\n".join(lines) + "\n"


def write_cnf(path, formula: Formula, num_vars: int, comments: Sequence[str] = ()) -> None:
    with open(path, "w") as f:
        f.write(formula_to_dimacs(formula, num_vars, comments))
