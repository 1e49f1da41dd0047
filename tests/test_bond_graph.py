import pytest

from dft_profiles.exceptions import GraphError
from dft_profiles.calculators.bond_integrals.bond_graph import BondGraph, bond_key, validate_graphs


class TestBondGraph:

    def test_spherical_has_no_bonds(self):
        g = BondGraph.spherical("A")
        assert g.segments == ["A"]
        assert g.bonds == []
        assert g.weights == {"A": 1.0}
        assert g.directed_bonds() == []

    def test_homosegmented_weight(self):
        g = BondGraph.homosegmented("P", 8)
        assert g.weights["P"] == pytest.approx(8.0)

    def test_tree_traversal_from_first_segment(self):
        g = BondGraph("branched", ["c", "a", "b", "d"], bonds=[("c", "a"), ("c", "b"), ("b", "d")])
        assert g.root == "c"
        assert g.order[0] == "c"
        assert g.parent["d"] == "b"
        assert sorted(g.children("c")) == ["a", "b"]
        assert len(g.directed_bonds()) == 6

    def test_bond_lengths(self):
        g = BondGraph("dimer", ["a", "b"], bonds=[("b", "a")], bond_lengths={("a", "b"): 0.8})
        assert g.bond_lengths[bond_key("a", "b")] == pytest.approx(0.8)

    def test_cycle_rejected(self):
        with pytest.raises(GraphError, match="cycle"):
            BondGraph("ring", ["a", "b", "c"], bonds=[("a", "b"), ("b", "c"), ("c", "a")])

    def test_disconnected_rejected(self):
        with pytest.raises(GraphError):
            BondGraph("split", ["a", "b", "c"], bonds=[("a", "b")])

    @pytest.mark.parametrize(
        "segments, bonds",
        [
            (["a", "b"], [("a", "x")]),
            (["a", "b"], [("a", "a")]),
            (["a", "b"], [("a", "b"), ("b", "a")]),
            (["a", "a"], []),
            ([], []),
        ],
    )
    def test_malformed_graphs(self, segments, bonds):
        with pytest.raises(GraphError):
            BondGraph("bad", segments, bonds=bonds)

    def test_resolved_chain_needs_unit_weights(self):
        with pytest.raises(GraphError):
            BondGraph("dimer", ["a", "b"], bonds=[("a", "b")], weights={"a": 2.0})

    def test_non_positive_weight(self):
        with pytest.raises(GraphError):
            BondGraph.homosegmented("P", 0.0)

    def test_shared_segment_between_molecules(self):
        with pytest.raises(GraphError):
            validate_graphs([BondGraph.spherical("A"), BondGraph("dimer", ["A", "B"], bonds=[("A", "B")])])
