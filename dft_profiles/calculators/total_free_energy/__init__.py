"""
Total free energy subpackage

Residual functional protocol (oracle.py) and the composition of its
contributions (total_free_energy.py).
"""


from .oracle import FunctionalOracle
