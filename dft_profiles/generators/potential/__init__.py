"""
Potential subpackage

Registry of isotropic potentials, used for segment pairs and for planar walls.
"""


from .pair_potential_isotropic import pair_potential_isotropic
from .pair_potential_isotropic_registry import (
    register_isotropic_pair_potential,
    get_isotropic_pair_potential_factory,
    registered_potential_types,
)
