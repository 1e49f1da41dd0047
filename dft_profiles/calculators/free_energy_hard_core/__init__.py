"""
Hard-core subpackage

Carnahan-Starling repulsion in a (weighted) local density approximation.
"""


from .hard_core_local import LocalHardCoreOracle, carnahan_starling_symbolic
