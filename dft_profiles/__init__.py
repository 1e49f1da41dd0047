"""
dft_profiles

Inhomogeneous density profiles of molecular fluids (spheres, homosegmented
and heterosegmented chains) from a classical density functional, solved
with a damped Picard iteration on a planar periodic grid.
"""


from .utils import create_unique_scratch_dir, ExecutionContext
from .exceptions import (
    SolveError,
    GraphError,
    NumericalError,
    ConvergenceFailure,
    DivergenceFailure,
    SolveCancelled,
)
from .calculators.bond_integrals.bond_graph import BondGraph
from .calculators.one_d_profile_iterator.picard_iterator import solve, ProfileResult, SolverState
