"""
Mean-field subpackage

Random-phase attraction between segments through planar-projected pair potentials.
"""


from .mean_field_planer import MeanFieldPlanerOracle
