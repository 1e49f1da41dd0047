from .ideal import IdealOracle
