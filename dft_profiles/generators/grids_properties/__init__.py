"""
Grids properties subpackage

Planar periodic grid, bulk and phase initial profiles and wall potentials.
"""


from .k_and_r_space_box import r_k_space_box, planar_grid
from .bulk_rho_planer import bulk_rho_planer, phase_profile_planer
from .external_potential_grid import external_potential_grid
