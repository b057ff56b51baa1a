"""
Exceptions raised by the solver and its boundary layers.

An unsatisfiable formula is an ordinary result, never an exception. The classes
below signal broken input or a broken invariant.
"""

from typing import List, Optional


class PutnamError(Exception):
    """Base class for all solver specific exceptions."""

    def __init__(self, message: str = None):
        self.message = message
        super().__init__(message)


class InconsistentAssignmentError(PutnamError):
    """
    Raised when an already decided variable is assigned again.

    Propagation and branching only ever assign undefined variables, so this
    always points at a defect in the search itself.
    """

    def __init__(self, message: str = "Variable is already assigned",
                 variable: Optional[int] = None):
        self.variable = variable
        if variable is not None:
            message = f"{message}: variable {variable}"
        super().__init__(message)


class InvalidClauseError(PutnamError):
    """Raised when a clause references a variable outside [0, num_vars)."""

    def __init__(self, message: str = "Invalid clause detected", clause: List = None):
        self.clause = clause
        if clause is not None:
            message = f"{message}: {clause}"
        super().__init__(message)


class DimacsParseError(PutnamError):
    """Raised when DIMACS input cannot be decoded."""

    def __init__(self, message: str = "Malformed DIMACS input",
                 line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
