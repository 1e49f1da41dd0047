"""
Calculators subpackage

Bond integrals, residual functionals, the Picard profile iterator
and the observables computed from a converged profile.
"""
