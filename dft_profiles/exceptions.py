# dft_profiles/exceptions.py

"""
Error taxonomy of the density-profile solver.

Every solver error may carry the last available `ProfileResult` in
`error.result` so the caller can inspect or warm-start from it.
"""


class SolveError(Exception):
    """Base class for all failures raised while solving for a profile."""

    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result

    @property
    def profile(self):
        return None if self.result is None else self.result.profile


class GraphError(SolveError):
    """Malformed bond topology (cycle, dangling bond, ...). Raised at setup."""


class NumericalError(SolveError):
    """Non-finite value coming out of the functional or the update arithmetic."""


class ConvergenceFailure(SolveError):
    """Iteration cap reached; `result` holds the last iterate."""


class DivergenceFailure(SolveError):
    """Residual became non-finite or kept growing without bound."""


class SolveCancelled(SolveError):
    """Stop flag or deadline honoured between two iterations."""
