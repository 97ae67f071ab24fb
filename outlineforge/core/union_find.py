"""Disjoint-set forest over string keys.

Keys are interned into an arena and the forest itself is two flat integer
lists (parent and rank), so no node objects ever alias each other.
"""

from typing import Dict, Hashable, Iterable, List


class DisjointSet:
    """Union-find with path compression and union by rank.

    Examples:
        >>> forest = DisjointSet(['a', 'b', 'c'])
        >>> forest.union('a', 'b')
        True
        >>> forest.find('b') == forest.find('a')
        True
        >>> forest.union('b', 'a')
        False
    """

    def __init__(self, keys: Iterable[Hashable] = ()):
        self._index: Dict[Hashable, int] = {}
        self._keys: List[Hashable] = []
        self._parent: List[int] = []
        self._rank: List[int] = []
        for key in keys:
            self.add(key)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._index

    def add(self, key: Hashable) -> int:
        """Register ``key`` as its own singleton set; no-op if already present."""
        if key in self._index:
            return self._index[key]
        idx = len(self._keys)
        self._index[key] = idx
        self._keys.append(key)
        self._parent.append(idx)
        self._rank.append(0)
        return idx

    def find(self, key: Hashable) -> Hashable:
        """Return the root key of the set containing ``key``.

        Raises:
            KeyError: If ``key`` was never added
        """
        return self._keys[self._find_index(self._index[key])]

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Merge the sets of ``a`` and ``b``. Returns False if already joined."""
        root_a = self._find_index(self._index[a])
        root_b = self._find_index(self._index[b])
        if root_a == root_b:
            return False

        if self._rank[root_a] < self._rank[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        if self._rank[root_a] == self._rank[root_b]:
            self._rank[root_a] += 1
        return True

    def groups(self) -> Dict[Hashable, List[Hashable]]:
        """Map each root key to its members, in insertion order."""
        grouped: Dict[Hashable, List[Hashable]] = {}
        for idx, key in enumerate(self._keys):
            root = self._keys[self._find_index(idx)]
            grouped.setdefault(root, []).append(key)
        return grouped

    def _find_index(self, idx: int) -> int:
        root = idx
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[idx] != root:
            self._parent[idx], idx = root, self._parent[idx]
        return root


__all__ = ['DisjointSet']
