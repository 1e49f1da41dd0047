import time

import numpy as np
import pytest
from numpy.testing import assert_allclose

from dft_profiles.exceptions import (
    ConvergenceFailure,
    DivergenceFailure,
    GraphError,
    NumericalError,
    SolveCancelled,
)
from dft_profiles.utils import ExecutionContext
from dft_profiles.calculators.bond_integrals.bond_graph import BondGraph
from dft_profiles.calculators.free_energy_ideal.ideal import IdealOracle
from dft_profiles.calculators.free_energy_hard_core.hard_core_local import LocalHardCoreOracle
from dft_profiles.calculators.one_d_profile_iterator.damping import AdaptiveDamping
from dft_profiles.calculators.one_d_profile_iterator.picard_iterator import (
    SolverState,
    max_relative_metric,
    rms_metric,
    solve,
)
from dft_profiles.generators.density_weights.bond_weights_planer import step_weight_planer
from dft_profiles.generators.density_weights.convolution import minimum_image_distance
from dft_profiles.generators.grids_properties.k_and_r_space_box import planar_grid


def zero_potential(segments, n):
    return {s: np.zeros(n) for s in segments}


class TestSolveBasics:

    def test_ideal_gas_converges_in_one_iteration(self, grid):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = IdealOracle.from_graphs([g], {"A": 0.5})

        result = solve(None, {"A": 0.5}, zero_potential(["A"], n), [g], oracle)

        assert result.state is SolverState.CONVERGED
        assert result.converged
        assert result.iterations == 1
        assert_allclose(result.profile["A"], 0.5)

    def test_dimer_stays_uniform(self, grid):
        n = len(grid["z"])
        g = BondGraph("dimer", ["a", "b"], bonds=[("a", "b")])
        bulk = {"a": 0.2, "b": 0.2}
        oracle = IdealOracle.from_graphs([g], bulk)

        result = solve(None, bulk, zero_potential(["a", "b"], n), [g], oracle, grid=grid)

        assert result.iterations == 1
        assert_allclose(result.profile["a"], 0.2, rtol=1e-10)
        assert_allclose(result.profile["b"], 0.2, rtol=1e-10)

    def test_ideal_gas_at_hard_wall(self, grid):
        z = grid["z"]
        g = BondGraph.spherical("A")
        v = np.where(z < 2.0, 2e16, 0.0)
        oracle = IdealOracle.from_graphs([g], {"A": 0.5})

        result = solve(None, {"A": 0.5}, {"A": v}, [g], oracle, damping=0.5, tolerance=1e-10)

        assert_allclose(result.profile["A"][z < 2.0], 0.0, atol=1e-9)
        assert_allclose(result.profile["A"][z >= 2.0], 0.5, rtol=1e-9)

    def test_spherical_reduction_of_chain_molecule(self, grid):
        # a resolved one-segment molecule and a chain of length 1 are both spheres
        z = grid["z"]
        v = 0.3 * np.cos(2 * np.pi * z / grid["box_length"])
        profiles = []
        for g in (BondGraph.spherical("A"), BondGraph.homosegmented("A", 1.0), BondGraph("mol", ["A"])):
            oracle = IdealOracle.from_graphs([g], {"A": 0.1})
            result = solve(None, {"A": 0.1}, {"A": v}, [g], oracle, damping=1.0)
            profiles.append(result.profile["A"])
        assert_allclose(profiles[0], 0.1 * np.exp(-v))
        assert_allclose(profiles[0], profiles[1])
        assert_allclose(profiles[0], profiles[2])


class TestSolveFixedPoint:

    @staticmethod
    def shifted_oracle(scripted_oracle):
        # constant field: fixed point rho_b * exp(0.1)
        return scripted_oracle(["A"], field_fn=lambda profile, call: -0.1)

    def test_fixed_point_independent_of_damping(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        profiles = []
        for damping in (0.3, 0.7, AdaptiveDamping(0.5, 1e-3)):
            result = solve(
                None, {"A": 0.4}, zero_potential(["A"], n), [g],
                self.shifted_oracle(scripted_oracle), damping=damping, tolerance=1e-11,
            )
            profiles.append(result.profile["A"])
        for p in profiles:
            assert_allclose(p, 0.4 * np.exp(0.1), rtol=1e-9)

    def test_restart_from_solution_is_idempotent(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        first = solve(None, {"A": 0.4}, zero_potential(["A"], n), [g],
                      self.shifted_oracle(scripted_oracle), damping=0.5, tolerance=1e-10)
        second = solve(first.profile, {"A": 0.4}, zero_potential(["A"], n), [g],
                       self.shifted_oracle(scripted_oracle), damping=0.5, tolerance=1e-10)
        assert second.iterations == 1
        assert_allclose(second.profile["A"], first.profile["A"], rtol=1e-9)

    def test_history_records_residual_and_alpha(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        result = solve(None, {"A": 0.4}, zero_potential(["A"], n), [g],
                       self.shifted_oracle(scripted_oracle), damping=0.5, tolerance=1e-8)
        iterations = [h[0] for h in result.history]
        residuals = [h[1] for h in result.history]
        assert iterations == list(range(1, result.iterations + 1))
        assert all(h[2] == pytest.approx(0.5) for h in result.history)
        assert residuals == sorted(residuals, reverse=True)
        assert result.residual == pytest.approx(residuals[-1])

    def test_max_iterations_exceeded(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        with pytest.raises(ConvergenceFailure) as info:
            solve(None, {"A": 0.4}, zero_potential(["A"], n), [g],
                  self.shifted_oracle(scripted_oracle), damping=0.1, max_iterations=5)
        result = info.value.result
        assert result.state is SolverState.MAX_ITER_EXCEEDED
        assert result.iterations == 5
        assert info.value.profile is result.profile

    def test_rms_metric_option(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        result = solve(None, {"A": 0.4}, zero_potential(["A"], n), [g],
                       self.shifted_oracle(scripted_oracle), damping=0.5, metric="rms")
        assert result.converged


class TestSolveFailures:

    def test_divergence_detected(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = scripted_oracle(["A"], field_fn=lambda profile, call: -float(call))
        with pytest.raises(DivergenceFailure) as info:
            solve(None, {"A": 0.1}, zero_potential(["A"], n), [g], oracle,
                  damping=1.0, divergence_window=3, divergence_ratio=10.0)
        assert info.value.result.state is SolverState.DIVERGED
        assert oracle.calls == 4

    def test_bounded_transient_after_warm_start_converges(self, grid, scripted_oracle):
        # the field drifts with growing steps for 40 calls, then settles
        def drifting_field(profile, call):
            return -1e-6 * (1.3 ** min(call, 40) - 1.0)

        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = scripted_oracle(["A"], field_fn=drifting_field)

        result = solve(None, {"A": 0.4}, zero_potential(["A"], n), [g], oracle,
                       damping=1.0, tolerance=1e-12, max_iterations=100)

        residuals = [h[1] for h in result.history]
        assert result.converged
        assert result.iterations == 41
        assert all(b > a for a, b in zip(residuals[:39], residuals[1:40]))
        assert residuals[39] > 1e3 * residuals[0]
        assert max(residuals) < 1.0

    def test_nan_from_oracle_is_numerical_error(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = scripted_oracle(["A"], field_fn=lambda profile, call: np.nan)
        with pytest.raises(NumericalError):
            solve(None, {"A": 0.1}, zero_potential(["A"], n), [g], oracle)

    def test_oracle_exception_propagates_unchanged(self, grid, failing_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = failing_oracle(RuntimeError("functional exploded"))
        with pytest.raises(RuntimeError, match="functional exploded"):
            solve(None, {"A": 0.1}, zero_potential(["A"], n), [g], oracle)
        assert oracle.calls == 1

    def test_invalid_graph_rejected_before_oracle_call(self, grid, scripted_oracle):
        n = len(grid["z"])
        oracle = scripted_oracle(["A", "B"])
        graphs = [BondGraph.spherical("A"), BondGraph("dimer", ["A", "B"], bonds=[("A", "B")])]
        with pytest.raises(GraphError):
            solve(None, {"A": 0.1, "B": 0.1}, zero_potential(["A", "B"], n), graphs, oracle, grid=grid)
        assert oracle.calls == 0

    def test_cyclic_molecule_rejected_before_oracle_call(self, grid, scripted_oracle):
        oracle = scripted_oracle(["a", "b", "c"])
        graph = BondGraph("ring", ["a", "b", "c"], bonds=[("a", "b"), ("b", "c")])
        graph.bonds.append(("c", "a"))
        with pytest.raises(GraphError, match="cycle"):
            solve(None, {"a": 0.1, "b": 0.1, "c": 0.1}, zero_potential(["a", "b", "c"], len(grid["z"])),
                  [graph], oracle, grid=grid)
        assert oracle.calls == 0

    def test_should_stop_cancels_between_iterations(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = scripted_oracle(["A"], field_fn=lambda profile, call: -0.1)
        with pytest.raises(SolveCancelled) as info:
            solve(None, {"A": 0.4}, zero_potential(["A"], n), [g], oracle,
                  damping=0.1, should_stop=lambda: oracle.calls >= 2)
        assert info.value.result.state is SolverState.CANCELLED
        assert info.value.result.iterations == 2

    def test_expired_deadline(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        oracle = scripted_oracle(["A"])
        with pytest.raises(SolveCancelled) as info:
            solve(None, {"A": 0.4}, zero_potential(["A"], n), [g], oracle, deadline=time.monotonic() - 1.0)
        assert oracle.calls == 0
        assert info.value.result.iterations == 0
        assert_allclose(info.value.profile["A"], 0.4)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tolerance": 0.0},
            {"max_iterations": 0},
            {"temperature": -1.0},
            {"damping": 1.5},
            {"metric": "l1"},
        ],
    )
    def test_invalid_settings(self, grid, scripted_oracle, kwargs):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        with pytest.raises(ValueError):
            solve(None, {"A": 0.4}, zero_potential(["A"], n), [g], scripted_oracle(["A"]), **kwargs)

    def test_missing_inputs(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        with pytest.raises(ValueError):
            solve(None, {}, zero_potential(["A"], n), [g], scripted_oracle(["A"]))
        with pytest.raises(ValueError):
            solve({"A": np.ones(n + 1)}, {"A": 0.1}, zero_potential(["A"], n), [g], scripted_oracle(["A"]))

    def test_bonded_molecule_needs_weights_or_grid(self, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph("dimer", ["a", "b"], bonds=[("a", "b")])
        with pytest.raises(ValueError):
            solve(None, {"a": 0.1, "b": 0.1}, zero_potential(["a", "b"], n), [g], scripted_oracle(["a", "b"]))


class TestMetricsAndLogging:

    def test_metrics_scale_with_bulk(self):
        raw = {"A": np.array([1.1, 1.0]), "B": np.array([0.0, 0.2])}
        old = {"A": np.array([1.0, 1.0]), "B": np.array([0.0, 0.0])}
        bulk = {"A": 1.0, "B": 0.0}
        assert max_relative_metric(raw, old, bulk) == pytest.approx(0.2)
        assert rms_metric(raw, old, bulk) == pytest.approx(np.sqrt((0.01 + 0.04) / 4))

    def test_progress_written_to_scratch(self, tmp_path, grid, scripted_oracle):
        n = len(grid["z"])
        g = BondGraph.spherical("A")
        ctx = ExecutionContext(scratch_dir=tmp_path)
        oracle = scripted_oracle(["A"], field_fn=lambda profile, call: -0.1)
        solve(None, {"A": 0.4}, zero_potential(["A"], n), [g], oracle, damping=0.5, log_period=5, ctx=ctx)
        text = (tmp_path / "data_log_output.txt").read_text(encoding="utf-8")
        assert "Converged" in text


def direct_bond_matrix(grid, length):
    """Circulant matrix of the planar bond step, half weight on the edge points."""
    z = grid["z"]
    dz = grid["dz"]
    d = np.abs(z[:, None] - z[None, :])
    d = np.minimum(d, grid["box_length"] - d)
    w = np.where(d < length - 0.5 * dz, 1.0, np.where(d < length + 0.5 * dz, 0.5, 0.0))
    return w / w[0].sum()


class TestSolveProfiles:

    def test_hard_core_dimer_stays_at_bulk(self, grid):
        n = len(grid["z"])
        g = BondGraph("dimer", ["a", "b"], bonds=[("a", "b")])
        bulk = {"a": 0.3, "b": 0.3}
        smoothing = {s: step_weight_planer(grid, 0.5) for s in ("a", "b")}
        oracle = LocalHardCoreOracle.from_graphs(
            [g], bulk, diameters={"a": 1.0, "b": 1.0}, smoothing_weights=smoothing,
        )
        fields, bulk_fields = oracle.evaluate({s: np.full(n, 0.3) for s in ("a", "b")})
        assert bulk_fields["a"] > 1.0
        assert_allclose(fields["a"], bulk_fields["a"], rtol=1e-10)

        result = solve(None, bulk, zero_potential(["a", "b"], n), [g], oracle, grid=grid)

        assert result.iterations == 1
        assert_allclose(result.profile["a"], 0.3, rtol=1e-10)
        assert_allclose(result.profile["b"], 0.3, rtol=1e-10)

    def test_ideal_trimer_matches_direct_convolution(self):
        grid = planar_grid(12.8, 128)
        z = grid["z"]
        phase = 2 * np.pi * z / grid["box_length"]
        potentials = {
            "a": 0.8 * np.cos(phase),
            "b": 0.5 * np.sin(2 * phase),
            "c": -0.6 * np.cos(phase) + 0.2 * np.sin(phase),
        }
        bulk = {"a": 0.1, "b": 0.1, "c": 0.1}
        g = BondGraph("trimer", ["a", "b", "c"], bonds=[("a", "b"), ("b", "c")])
        oracle = IdealOracle.from_graphs([g], bulk)

        result = solve(None, bulk, potentials, [g], oracle, damping=1.0, tolerance=1e-12, grid=grid)

        w = direct_bond_matrix(grid, 1.0)
        e = {s: np.exp(-v) for s, v in potentials.items()}
        expected = {
            "a": 0.1 * e["a"] * (w @ (e["b"] * (w @ e["c"]))),
            "b": 0.1 * e["b"] * (w @ e["a"]) * (w @ e["c"]),
            "c": 0.1 * e["c"] * (w @ (e["b"] * (w @ e["a"]))),
        }
        assert result.converged
        for s in ("a", "b", "c"):
            assert np.ptp(result.profile[s]) > 1e-2
            assert_allclose(result.profile[s], expected[s], rtol=1e-10)

    def test_hard_core_wall_profile_independent_of_damping(self, small_grid):
        z = small_grid["z"]
        wall = minimum_image_distance(z, 0.0, small_grid["box_length"]) < 1.0
        v = np.where(wall, 2e16, 0.0)
        g = BondGraph.spherical("A")

        profiles = []
        for alpha in (0.1, 0.3):
            oracle = LocalHardCoreOracle.from_graphs(
                [g], {"A": 0.2}, diameters={"A": 1.0},
                smoothing_weights={"A": step_weight_planer(small_grid, 0.5)},
            )
            result = solve(None, {"A": 0.2}, {"A": v}, [g], oracle,
                           damping=alpha, tolerance=1e-10, max_iterations=3000)
            assert result.converged
            profiles.append(result.profile["A"])

        assert_allclose(profiles[0][wall], 0.0, atol=1e-10)
        assert np.ptp(profiles[0][~wall]) > 1e-3
        assert_allclose(profiles[0], profiles[1], atol=1e-8)
