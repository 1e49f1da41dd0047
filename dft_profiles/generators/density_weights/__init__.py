"""
Density weights subpackage

Planar k-space kernels: chain bonds, mean-field interactions
and the FFT convolution they are applied with.
"""


from .convolution import convolve_planer, weight_to_k_space, minimum_image_distance
from .bond_weights_planer import bond_weights_planer, chain_bond_weight_planer, step_weight_planer
from .mf_weights_planer import mf_weights_planer, planar_projection, parse_pair_key
