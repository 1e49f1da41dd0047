# dft_profiles/calculators/bond_integrals/bond_graph.py

"""
Segment connectivity of a single molecule.

The three molecular representations share this one description:

    spherical particle      one segment, weight 1, no bonds
    homosegmented chain     one segment, weight m_i, no bonds
    heterosegmented chain   several segments, weight 1 each, tree of bonds
"""

from collections import deque

from dft_profiles.exceptions import GraphError


def bond_key(a, b):
    """Orientation-free key of the bond a-b."""
    return (a, b) if a <= b else (b, a)


class BondGraph:
    """
    Tree of bonded segments of one molecule.

    Parameters
    ----------
    name : str
        Molecule name (only used in messages).
    segments : list of str
        Segment names; the first one is the traversal root.
    bonds : list of (str, str), optional
        Undirected bonds.
    weights : dict, optional
        Segment -> chain-length weight m_alpha. Defaults to 1.0.
    bond_lengths : dict, optional
        bond_key(a, b) -> bond length. Defaults to `default_bond_length`.
    """

    def __init__(self, name, segments, bonds=None, weights=None,
                 bond_lengths=None, default_bond_length=1.0):
        self.name = str(name)
        self.segments = [str(s) for s in segments]
        self.bonds = [(str(a), str(b)) for a, b in (bonds or [])]
        self.weights = {s: 1.0 for s in self.segments}
        for s, m in (weights or {}).items():
            self.weights[str(s)] = float(m)

        self.bond_lengths = {bond_key(a, b): float(default_bond_length) for a, b in self.bonds}
        for (a, b), length in (bond_lengths or {}).items():
            self.bond_lengths[bond_key(str(a), str(b))] = float(length)

        self.validate()

        self.neighbors = {s: [] for s in self.segments}
        for a, b in self.bonds:
            self.neighbors[a].append(b)
            self.neighbors[b].append(a)

        self.root = self.segments[0]
        self.order, self.parent = self._breadth_first()

    @classmethod
    def spherical(cls, segment):
        return cls(segment, [segment])

    @classmethod
    def homosegmented(cls, segment, chain_length):
        return cls(segment, [segment], weights={segment: chain_length})

    def validate(self):
        """Raise GraphError unless the segments and bonds form a single tree."""
        if not self.segments:
            raise GraphError(f"Molecule '{self.name}' has no segments.")
        if len(set(self.segments)) != len(self.segments):
            raise GraphError(f"Molecule '{self.name}' lists a segment twice.")

        known = set(self.segments)
        for s in self.weights:
            if s not in known:
                raise GraphError(f"Weight given for unknown segment '{s}' in molecule '{self.name}'.")
        for s, m in self.weights.items():
            if not m > 0.0:
                raise GraphError(f"Segment '{s}' of molecule '{self.name}' has non-positive weight {m}.")
        if len(self.segments) > 1:
            for s, m in self.weights.items():
                if m != 1.0:
                    raise GraphError(
                        f"Segment '{s}' of the resolved molecule '{self.name}' must have weight 1, got {m}."
                    )

        seen = set()
        for a, b in self.bonds:
            if a not in known or b not in known:
                raise GraphError(f"Bond {a}-{b} of molecule '{self.name}' references an unknown segment.")
            if a == b:
                raise GraphError(f"Segment '{a}' of molecule '{self.name}' is bonded to itself.")
            key = bond_key(a, b)
            if key in seen:
                raise GraphError(f"Bond {a}-{b} of molecule '{self.name}' is listed twice.")
            seen.add(key)

        for key, length in self.bond_lengths.items():
            if key not in seen:
                raise GraphError(f"Bond length given for missing bond {key[0]}-{key[1]} in molecule '{self.name}'.")
            if not length > 0.0:
                raise GraphError(f"Bond {key[0]}-{key[1]} of molecule '{self.name}' has non-positive length.")

        # union-find: a bond joining two already connected segments closes a ring
        parent = {s: s for s in self.segments}

        def find(s):
            while parent[s] != s:
                parent[s] = parent[parent[s]]
                s = parent[s]
            return s

        for a, b in self.bonds:
            ra, rb = find(a), find(b)
            if ra == rb:
                raise GraphError(f"Bond graph of molecule '{self.name}' contains a cycle through {a}-{b}.")
            parent[ra] = rb

        if len(self.bonds) != len(self.segments) - 1:
            raise GraphError(f"Segments of molecule '{self.name}' are not all connected.")

    def _breadth_first(self):
        order = [self.root]
        parent = {self.root: None}
        queue = deque([self.root])
        while queue:
            s = queue.popleft()
            for t in self.neighbors[s]:
                if t not in parent:
                    parent[t] = s
                    order.append(t)
                    queue.append(t)
        return order, parent

    def children(self, segment):
        return [t for t in self.neighbors[segment] if self.parent.get(t) == segment]

    def directed_bonds(self):
        """Every (target, source) pair, i.e. the keys of the bond integrals."""
        return [(a, b) for a in self.segments for b in self.neighbors[a]]

    def __repr__(self):
        return f"BondGraph(name={self.name!r}, segments={self.segments!r}, bonds={self.bonds!r})"


def validate_graphs(graphs):
    """Check that no segment belongs to two molecules."""
    owner = {}
    for graph in graphs:
        for s in graph.segments:
            if s in owner:
                raise GraphError(
                    f"Segment '{s}' appears in molecules '{owner[s]}' and '{graph.name}'."
                )
            owner[s] = graph.name
    return owner
