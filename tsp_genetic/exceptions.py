"""
Exceptions raised by the genetic TSP solver.
"""


class TSPGeneticError(Exception):
    """Base exception for the solver."""

    def __init__(self, message: str = "", details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(TSPGeneticError, ValueError):
    """Raised for invalid settings or inputs, before any solve work starts."""
    pass


class InitializationError(TSPGeneticError):
    """Raised when an explicit cap on initialization attempts is exhausted."""

    def __init__(self, attempts: int):
        super().__init__(
            f"No population with unique parent scores after {attempts} attempts",
            {"attempts": attempts},
        )
        self.attempts = attempts


class SolveCancelled(TSPGeneticError):
    """Raised when a solve is aborted through its cancellation signal."""

    def __init__(self, phase: str, generation: int = 0):
        super().__init__(f"Solve cancelled during {phase}", {"phase": phase, "generation": generation})
        self.phase = phase
        self.generation = generation


class RepairInvariantError(TSPGeneticError):
    """Raised by strict repair when duplicates and missing numbers disagree."""

    def __init__(self, duplicates: int, missing: int):
        super().__init__(
            f"Repair found {duplicates} duplicates but {missing} missing numbers",
            {"duplicates": duplicates, "missing": missing},
        )
        self.duplicates = duplicates
        self.missing = missing


class RepairInvariantWarning(RuntimeWarning):
    """Emitted by non-strict repair when duplicates and missing numbers disagree."""
    pass
