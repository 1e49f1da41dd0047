"""
One-d profile iterator subpackage

Density update, damping schedules and the Picard driver
for planar density profiles.
"""


from .damping import FixedDamping, AdaptiveDamping, make_damping
from .density_update import density_update, log_boltzmann_factors
from .picard_iterator import solve, ProfileResult, SolverState, max_relative_metric, rms_metric
