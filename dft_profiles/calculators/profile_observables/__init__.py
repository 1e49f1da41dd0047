from .observables import segment_numbers, adsorption, molecule_numbers
