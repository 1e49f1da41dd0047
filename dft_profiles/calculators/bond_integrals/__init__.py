"""
Bond-integrals subpackage

Bond graphs of the molecules and the message-passing evaluation
of the bond integrals for resolved chains.
"""


from .bond_graph import BondGraph, bond_key, validate_graphs
from .bond_integrals import bond_integrals, log_bond_integrals, log_convolve, bond_product
