# dft_profiles/calculators/one_d_profile_iterator/picard_iterator.py

"""
Damped Picard iteration of the Euler-Lagrange equation.

Every cycle runs, strictly in this order,

    functional oracle -> bond integrals -> density update -> residual -> mixing

and ends in one of the states CONVERGED, DIVERGED, MAX_ITER_EXCEEDED or
CANCELLED. Only CONVERGED returns normally; every other terminal state
raises a SolveError subclass that carries the last ProfileResult.
"""

import time
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field

import numpy as np

from dft_profiles.exceptions import (
    ConvergenceFailure,
    DivergenceFailure,
    SolveCancelled,
)
from dft_profiles.calculators.bond_integrals.bond_graph import validate_graphs
from dft_profiles.calculators.bond_integrals.bond_integrals import log_bond_integrals
from dft_profiles.calculators.one_d_profile_iterator.damping import make_damping
from dft_profiles.calculators.one_d_profile_iterator.density_update import (
    density_update,
    log_boltzmann_factors,
)
from dft_profiles.generators.density_weights.convolution import convolve_planer
from dft_profiles.generators.density_weights.bond_weights_planer import bond_weights_planer


class SolverState(Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    DIVERGED = "diverged"
    MAX_ITER_EXCEEDED = "max_iter_exceeded"
    CANCELLED = "cancelled"


@dataclass
class ProfileResult:
    profile: dict
    residual: float
    iterations: int
    state: SolverState
    history: list = field(default_factory=list)

    @property
    def converged(self):
        return self.state is SolverState.CONVERGED


def _scaled_residual(raw, old, bulk_state):
    parts = []
    for segment, rho in raw.items():
        scale = bulk_state[segment] if bulk_state[segment] > 0.0 else 1.0
        parts.append(np.ravel((rho - old[segment]) / scale))
    return np.concatenate(parts)


def max_relative_metric(raw, old, bulk_state):
    """max |rho_raw - rho_old| / rho_b over all segments and grid points."""
    return float(np.max(np.abs(_scaled_residual(raw, old, bulk_state))))


def rms_metric(raw, old, bulk_state):
    """Root-mean-square of the bulk-scaled Euler-Lagrange residual."""
    r = _scaled_residual(raw, old, bulk_state)
    return float(np.sqrt(np.mean(r * r)))


CONVERGENCE_METRICS = {
    "max_relative": max_relative_metric,
    "rms": rms_metric,
}

# relative change of order one: reference floor of the divergence test
DIVERGENCE_FLOOR = 1.0


def _prepare_inputs(initial_profile, bulk_state, external_potential, segments):
    bulk = {}
    for s in segments:
        if s not in bulk_state:
            raise ValueError(f"Missing bulk density for segment '{s}'.")
        rho_b = float(bulk_state[s])
        if not np.isfinite(rho_b) or rho_b < 0.0:
            raise ValueError(f"Bulk density of segment '{s}' must be finite and non-negative, got {rho_b}.")
        bulk[s] = rho_b

    external = {}
    for s in segments:
        if s not in external_potential:
            raise ValueError(f"Missing external potential for segment '{s}'.")
        external[s] = np.asarray(external_potential[s], dtype=float)

    shape = external[segments[0]].shape
    for s in segments:
        if external[s].shape != shape:
            raise ValueError(f"External potential of segment '{s}' has shape {external[s].shape}, expected {shape}.")
        if np.any(np.isnan(external[s])):
            raise ValueError(f"External potential of segment '{s}' contains NaN.")

    if initial_profile is None:
        profile = {s: np.full(shape, bulk[s]) for s in segments}
    else:
        profile = {}
        for s in segments:
            if s not in initial_profile:
                raise ValueError(f"Initial profile has no entry for segment '{s}'.")
            rho = np.array(initial_profile[s], dtype=float)
            if rho.shape != shape:
                raise ValueError(f"Initial profile of segment '{s}' has shape {rho.shape}, expected {shape}.")
            if not np.all(np.isfinite(rho)) or np.any(rho < 0.0):
                raise ValueError(f"Initial profile of segment '{s}' must be finite and non-negative.")
            profile[s] = rho

    return profile, bulk, external


def solve(
    initial_profile,
    bulk_state,
    external_potential,
    bond_graphs,
    functional_oracle,
    damping=0.1,
    tolerance=1e-8,
    max_iterations=1000,
    *,
    temperature=1.0,
    grid=None,
    bond_weights=None,
    convolve=convolve_planer,
    metric="max_relative",
    divergence_window=25,
    divergence_ratio=1e3,
    should_stop=None,
    deadline=None,
    log_period=None,
    ctx=None,
    verbose=False,
):
    """
    Solve the Euler-Lagrange equation for all segment profiles.

    Parameters
    ----------
    initial_profile : dict or None
        Segment -> starting density. None broadcasts the bulk state.
    bulk_state : dict
        Segment -> bulk density, held fixed for the whole solve.
    external_potential : dict
        Segment -> V_ext(z) in energy units.
    bond_graphs : list of BondGraph
        One graph per molecule (validated here, before any iteration).
    functional_oracle : object
        `evaluate(profile) -> (fields, bulk)` with the residual functional
        derivative per segment and its bulk value.
    damping : float or schedule
        Mixing parameter in (0, 1], or a FixedDamping/AdaptiveDamping.
    tolerance : float
        Convergence threshold on the residual metric.
    max_iterations : int
        Iteration cap.
    temperature : float
        k_B T (β = 1/temperature).
    grid : dict, optional
        Planar grid used to build bond kernels when `bond_weights` is None.
    bond_weights : dict, optional
        bond_key(a, b) -> k-space bond kernel.
    convolve : callable
        convolve(field, weight_k) -> field.
    metric : str
        "max_relative" or "rms".
    divergence_window, divergence_ratio :
        The solve is declared diverged once the residual has grown for
        `divergence_window` consecutive iterations and exceeds
        `divergence_ratio` times the reference residual, the residual of
        the first iteration but at least 1. Bounded transients after a warm
        start never reach that bound.
    should_stop : callable, optional
        Polled between iterations; True cancels the solve.
    deadline : float, optional
        time.monotonic() value from which on the solve is cancelled.
    log_period : int, optional
        Print/log every `log_period` iterations.
    ctx : object, optional
        With `scratch_dir`: progress is appended to data_log_output.txt.
    verbose : bool
        Print progress to stdout.

    Returns
    -------
    ProfileResult
        State CONVERGED.

    Raises
    ------
    GraphError, NumericalError, ConvergenceFailure, DivergenceFailure, SolveCancelled
    """

    # -----------------------------
    # Setup (INITIALIZING)
    # -----------------------------
    graphs = list(bond_graphs)
    if not graphs:
        raise ValueError("At least one bond graph must be supplied.")
    for graph in graphs:
        graph.validate()
    validate_graphs(graphs)
    segments = [s for graph in graphs for s in graph.segments]

    if not tolerance > 0.0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    if int(max_iterations) < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
    if not temperature > 0.0:
        raise ValueError(f"temperature must be positive, got {temperature}")
    if metric not in CONVERGENCE_METRICS:
        raise ValueError(f"Unknown convergence metric '{metric}'. Available: {list(CONVERGENCE_METRICS)}")
    metric_fn = CONVERGENCE_METRICS[metric]

    schedule = make_damping(damping)
    schedule.reset()

    profile, bulk, external = _prepare_inputs(initial_profile, bulk_state, external_potential, segments)

    if any(graph.bonds for graph in graphs) and bond_weights is None:
        if grid is None:
            raise ValueError("Bonded molecules need either `bond_weights` or a `grid` to build them.")
        bond_weights = bond_weights_planer(graphs, grid)

    log_file = None
    if ctx is not None and getattr(ctx, "scratch_dir", None) is not None:
        Path(ctx.scratch_dir).mkdir(parents=True, exist_ok=True)
        log_file = Path(ctx.scratch_dir) / "data_log_output.txt"

    def log(line):
        if verbose:
            print(line)
        if log_file is not None:
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    def cancelled():
        if should_stop is not None and should_stop():
            return True
        return deadline is not None and time.monotonic() >= deadline

    history = []
    result = ProfileResult(profile, float("inf"), 0, SolverState.INITIALIZING, history)

    log(f"🚀 Starting Picard iteration ({len(segments)} segment(s), damping {schedule!r}, tolerance {tolerance:.1e})")
    log(f"{'Iter':>6s} | {'residual':>12s} | {'alpha':>6s}")

    # -----------------------------
    # Iteration loop (ITERATING)
    # -----------------------------
    previous = None
    reference = None
    growth_streak = 0

    for iteration in range(1, int(max_iterations) + 1):

        if cancelled():
            result.state = SolverState.CANCELLED
            log(f"⚠️ Solve cancelled after {result.iterations} iteration(s).")
            raise SolveCancelled(f"Solve cancelled after {result.iterations} iteration(s).", result)

        fields, bulk_fields = functional_oracle.evaluate(profile)

        log_factors = log_boltzmann_factors(graphs, fields, bulk_fields, external, temperature)

        log_integrals = {}
        for graph in graphs:
            log_integrals.update(log_bond_integrals(graph, log_factors, bond_weights, convolve))

        raw = density_update(graphs, bulk, log_factors, log_integrals)

        residual = metric_fn(raw, profile, bulk)
        if not np.isfinite(residual):
            result.state = SolverState.DIVERGED
            log(f"⚠️ Residual became non-finite at iteration {iteration}.")
            raise DivergenceFailure(f"Residual became non-finite at iteration {iteration}.", result)

        alpha = schedule.update(residual, previous)
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"Damping schedule produced alpha={alpha} outside (0, 1].")

        profile = {s: (1.0 - alpha) * profile[s] + alpha * raw[s] for s in segments}
        history.append((iteration, residual, alpha))
        result = ProfileResult(profile, residual, iteration, SolverState.ITERATING, history)

        if log_period and iteration % log_period == 0:
            log(f"{iteration:6d} | {residual:12.3e} | {alpha:6.4f}")

        if residual < tolerance:
            result.state = SolverState.CONVERGED
            log(f"✅ Converged in {iteration} iteration(s), residual {residual:.3e}.")
            return result

        if previous is not None and residual > previous:
            growth_streak += 1
        else:
            growth_streak = 0
        if reference is None:
            reference = max(residual, DIVERGENCE_FLOOR)

        if growth_streak >= divergence_window and residual > divergence_ratio * reference:
            result.state = SolverState.DIVERGED
            log(f"⚠️ Residual grew for {growth_streak} consecutive iterations (now {residual:.3e}).")
            raise DivergenceFailure(
                f"Residual grew for {growth_streak} consecutive iterations, "
                f"to {residual:.3e} (reference {reference:.3e}).",
                result,
            )

        previous = residual

    result.state = SolverState.MAX_ITER_EXCEEDED
    log(f"⚠️ Warning: not converged after {max_iterations} iterations (residual {result.residual:.3e}).")
    raise ConvergenceFailure(
        f"Not converged after {max_iterations} iterations (residual {result.residual:.3e}).",
        result,
    )
