"""
Generators subpackage

Grids, weight functions, potentials and parameter dictionaries
prepared for the calculators.
"""
