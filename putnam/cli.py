"""Command line front end: solve one DIMACS file and map the verdict to an exit code."""
import argparse
import logging
import sys

from putnam.solvers.dpll import DpllSolver
from putnam.utils.exceptions import PutnamError
from putnam.utils.parser import read_cnf

EXIT_SAT = 10
EXIT_UNSAT = 20
EXIT_ERROR = 1

# Literals per "v" line of the printed model.
STRIDE = 10


def format_model(model, default=True):
    """'v' lines for a model, 1-based; UNDEF variables take the `default` polarity."""
    lits = model.to_dimacs(default=default)
    if not lits:
        return ["v 0"]
    lines = []
    for i in range(0, len(lits), STRIDE):
        end = ' 0' if i + STRIDE >= len(lits) else ''
        lines.append('v {}{}'.format(' '.join(str(x) for x in lits[i:i + STRIDE]), end))
    return lines


def build_parser():
    parser = argparse.ArgumentParser(prog='putnam', description='A DPLL SAT solver')
    parser.add_argument('filename', type=str, help='Path to a DIMACS CNF file (.cnf or .cnf.gz)')
    parser.add_argument('--model', action='store_true', help='Print the satisfying assignment')
    parser.add_argument('--propagation', choices=DpllSolver.PROPAGATION_STRATEGIES, default='rescan')
    parser.add_argument('--backtracking', choices=DpllSolver.BACKTRACKING_STRATEGIES, default='copy')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log search progress')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    try:
        formula, num_vars = read_cnf(args.filename)
    except OSError as e:
        print(f"Error opening file {args.filename}: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (PutnamError, UnicodeDecodeError) as e:
        print(f"Error parsing DIMACS file: {e}", file=sys.stderr)
        return EXIT_ERROR

    solver = DpllSolver(formula, num_vars, propagation=args.propagation, backtracking=args.backtracking)
    result = solver.solve()
    if not result.satisfiable:
        print("UNSAT")
        return EXIT_UNSAT

    print("SAT")
    if args.model:
        for line in format_model(result.model):
            print(line)
    return EXIT_SAT


if __name__ == '__main__':
    sys.exit(main())
