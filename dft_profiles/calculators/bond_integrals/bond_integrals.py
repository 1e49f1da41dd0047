# dft_profiles/calculators/bond_integrals/bond_integrals.py

"""
Bond integrals of a tree-shaped molecule.

For every directed bond (alpha, alpha') the field

    I_aa'(z) = ∫ exp[ (β/m_a')(F^b_a' - F_a'(z') - V_a'(z')) ]
                 · Π_{a'' ≠ a} I_a'a''(z') · ω_aa'(z - z') dz'

is evaluated with a two-pass message-passing sweep over the tree: first
leaves to root, then root to leaves. Each directed bond is convolved
exactly once per call. Everything is carried in the log domain; the linear
convolution only ever sees exp(g - max g), which cannot overflow.
"""

import numpy as np

from dft_profiles.calculators.bond_integrals.bond_graph import bond_key
from dft_profiles.generators.density_weights.convolution import convolve_planer


def log_convolve(log_field, weight_k, convolve=convolve_planer):
    """log(ω * exp(log_field)) with a max shift; empty support gives -inf."""
    finite = np.isfinite(log_field)
    if not finite.any():
        return np.full(np.shape(log_field), -np.inf)

    shift = np.max(log_field[finite])
    with np.errstate(under="ignore"):
        values = convolve(np.exp(log_field - shift), weight_k)

    # FFT round-off can leave tiny negative values where the integral vanishes
    values = np.maximum(values, 0.0)
    with np.errstate(divide="ignore"):
        return shift + np.log(values)


def log_bond_integrals(graph, log_factors, bond_weights, convolve=convolve_planer):
    """
    Log bond integrals of one molecule.

    Parameters
    ----------
    graph : BondGraph
        Validated tree of the molecule.
    log_factors : dict
        Segment -> (β/m)(F^b - F(z) - V(z)) on the grid.
    bond_weights : dict
        bond_key(a, b) -> k-space bond kernel ω_ab.
    convolve : callable
        convolve(field, weight_k) -> field.

    Returns
    -------
    dict
        (target, source) -> log I_{target, source}(z). Empty for a single segment.
    """
    messages = {}
    if not graph.bonds:
        return messages

    def send(source, target):
        log_g = np.array(log_factors[source], dtype=float)
        for other in graph.neighbors[source]:
            if other != target:
                log_g = log_g + messages[(source, other)]

        key = bond_key(source, target)
        if key not in bond_weights:
            raise KeyError(f"No bond weight supplied for bond {key[0]}-{key[1]} of molecule '{graph.name}'.")
        messages[(target, source)] = log_convolve(log_g, bond_weights[key], convolve)

    # leaves -> root: a segment's children are all later in breadth-first order
    for segment in reversed(graph.order):
        parent = graph.parent[segment]
        if parent is not None:
            send(segment, parent)

    # root -> leaves: the message from the grandparent is already known
    for segment in graph.order:
        for child in graph.children(segment):
            send(segment, child)

    return messages


def bond_integrals(graph, log_factors, bond_weights, convolve=convolve_planer):
    """Bond integrals I_{aa'}(z) >= 0 of one molecule, keyed by (target, source)."""
    logs = log_bond_integrals(graph, log_factors, bond_weights, convolve)
    with np.errstate(under="ignore", over="ignore"):
        return {key: np.exp(value) for key, value in logs.items()}


def bond_product(graph, segment, log_integrals):
    """Π_{a' bonded to a} I_aa'(z) in log form; 0.0 (empty product) for no bonds."""
    total = 0.0
    for other in graph.neighbors[segment]:
        total = total + log_integrals[(segment, other)]
    return total
