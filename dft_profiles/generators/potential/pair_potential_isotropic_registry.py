# dft_profiles/generators/potential/pair_potential_isotropic_registry.py

"""
Name -> factory registry of isotropic potentials.

A factory takes the parameter dictionary of one interaction, e.g.
{"type": "wall_9_3", "sigma": 1.0, "epsilon": 2.0}, and returns a
vectorized callable V(r). The same registry serves segment-segment
mean-field interactions (r = pair distance) and segment-wall
interactions (r = distance to the wall plane).
"""

ISOTROPIC_PAIR_POTENTIAL_REGISTRY = {}


def register_isotropic_pair_potential(potential_type, factory_fn, overwrite=False):
    """
    Register a potential factory under `potential_type` (case-insensitive).

    Raises KeyError when the name is taken and `overwrite` is False.
    """
    if not callable(factory_fn):
        raise TypeError(f"Factory for '{potential_type}' must be callable")

    key = str(potential_type).strip().lower()
    if key in ISOTROPIC_PAIR_POTENTIAL_REGISTRY and not overwrite:
        raise KeyError(f"Isotropic potential '{key}' already registered")

    ISOTROPIC_PAIR_POTENTIAL_REGISTRY[key] = factory_fn


def registered_potential_types():
    return sorted(ISOTROPIC_PAIR_POTENTIAL_REGISTRY)


def get_isotropic_pair_potential_factory(potential):
    if not isinstance(potential, dict):
        raise TypeError("Potential definition must be a dict")

    pt = str(potential.get("type", "")).strip().lower()
    if pt not in ISOTROPIC_PAIR_POTENTIAL_REGISTRY:
        raise ValueError(
            f"Unknown potential type: '{pt}'. Available: {', '.join(registered_potential_types())}"
        )

    return ISOTROPIC_PAIR_POTENTIAL_REGISTRY[pt]
