# dft_profiles/generators/density_weights/convolution.py

import numpy as np
from scipy.fft import fft, ifft


def minimum_image_distance(z, origin, box_length):
    """Distance |z - origin| folded back into the periodic box."""
    d = np.abs(np.asarray(z, dtype=float) - origin) % box_length
    return np.minimum(d, box_length - d)


def weight_to_k_space(w_z, dz):
    """
    Fourier weights of a real-space kernel sampled on the periodic grid.

    `w_z[i]` is the kernel at separation z_i (index 0 = zero separation,
    upper half of the array = negative separations). The factor dz makes
    the discrete convolution approximate the continuous integral.
    """
    return fft(np.asarray(w_z, dtype=float)) * dz


def convolve_planer(field, weight_k):
    """(w * field)(z) on the periodic planar grid."""
    return ifft(fft(field) * weight_k).real
