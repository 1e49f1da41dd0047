# dft_profiles/calculators/one_d_profile_iterator/damping.py

"""
Mixing schedules for the Picard iteration:

    rho_new = (1 - alpha) * rho_old + alpha * rho_raw
"""


def _check_alpha(value, name):
    value = float(value)
    if not 0.0 < value <= 1.0:
        raise ValueError(f"{name} must lie in (0, 1], got {value}")
    return value


class FixedDamping:
    """Constant mixing parameter."""

    def __init__(self, alpha):
        self.alpha = _check_alpha(alpha, "alpha")

    def reset(self):
        pass

    def update(self, metric, previous_metric):
        return self.alpha

    def __repr__(self):
        return f"FixedDamping(alpha={self.alpha})"


class AdaptiveDamping:
    """
    Adaptive alpha-mixing: grow alpha while the residual decreases,
    halve it as soon as the residual goes up (oscillating update).
    """

    def __init__(self, alpha_max=0.1, alpha_min=1e-3, alpha_start=None, growth=1.05, shrink=0.5):
        self.alpha_max = _check_alpha(alpha_max, "alpha_max")
        self.alpha_min = _check_alpha(alpha_min, "alpha_min")
        if self.alpha_min > self.alpha_max:
            raise ValueError("alpha_min must not exceed alpha_max")
        if growth < 1.0 or not 0.0 < shrink < 1.0:
            raise ValueError("growth must be >= 1 and shrink must lie in (0, 1)")

        self.alpha_start = min(0.01, self.alpha_max) if alpha_start is None else _check_alpha(alpha_start, "alpha_start")
        self.alpha_start = min(max(self.alpha_start, self.alpha_min), self.alpha_max)
        self.growth = growth
        self.shrink = shrink
        self.alpha = self.alpha_start

    def reset(self):
        self.alpha = self.alpha_start

    def update(self, metric, previous_metric):
        if previous_metric is None:
            return self.alpha
        if metric < previous_metric:
            self.alpha = min(self.alpha * self.growth, self.alpha_max)
        else:
            self.alpha = max(self.alpha * self.shrink, self.alpha_min)
        return self.alpha

    def __repr__(self):
        return f"AdaptiveDamping(alpha_max={self.alpha_max}, alpha_min={self.alpha_min})"


def make_damping(damping):
    """Float -> FixedDamping; schedules are passed through."""
    if isinstance(damping, (FixedDamping, AdaptiveDamping)):
        return damping
    if hasattr(damping, "update") and hasattr(damping, "reset"):
        return damping
    return FixedDamping(damping)
