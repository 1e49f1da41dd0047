from .pair_potential_isotropic_registry import get_isotropic_pair_potential_factory
from .pair_potential_isotropic_default import pair_potential_isotropic_default

# built-in potentials are registered once, on first import
pair_potential_isotropic_default()


def pair_potential_isotropic(specific_pair_potential):
    """
    Vectorized potential for one interaction dictionary, such as
    {"type": "wca", "sigma": 1.0, "epsilon": 1.0}; the returned callable
    maps distances (pair or wall distances) to energies.

    New shapes plug in through the registry, e.g. a square-well wall:

        from dft_profiles.generators.potential import register_isotropic_pair_potential

        def square_well(p):
            width, depth = p.get("width", 1.0), p.get("epsilon", 1.0)
            return lambda r: np.where(np.asarray(r) < width, -depth, 0.0)

        register_isotropic_pair_potential("square_well", square_well)
    """
    factory = get_isotropic_pair_potential_factory(specific_pair_potential)
    return factory(specific_pair_potential)
