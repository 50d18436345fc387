"""
MemIndex B-Tree Index
=====================
In-memory B-Tree supporting insert, exact search, and bounded range query.

Architecture:
  - Every node holds a sorted list of (key, value) entries.
  - INTERNAL nodes additionally hold len(entries) + 1 child nodes.
    Invariant: keys in children[i] <= entries[i].key <= keys in children[i+1].
  - Nodes are owned by their parent (or the root pointer). No back-references.

Insertion:
  - Classic pre-emptive split: a full node is split on the way down, so the
    node receiving the new entry always has room.
  - A node is full at order - 1 entries. Split promotes entries[mid] with
    mid = (order - 1) // 2 into the parent.

Key ordering:
  - Keys only need to support < / > / == against each other.
  - Duplicate keys are kept (multimap). A new equal key lands after the equal
    keys met by the backward insertion scan.

Concurrency: single-writer, no locking.
NULLs: put(None) raises InvalidKeyError; lookups with None report absence.
Delete: not supported.
"""

import logging
import math
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)

# ─── Constants ──────────────────────────────────────────────────────────────

# Maximum entries per node is order - 1.
DEFAULT_ORDER = 3
MIN_ORDER = 2


class InvalidKeyError(ValueError):
    """Key rejected by put() (None, or a value with no total order such as NaN)."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Invalid index key: {key!r}")


def _is_null_key(key: Any) -> bool:
    """None and float NaN cannot take part in the key ordering."""
    if key is None:
        return True
    return isinstance(key, float) and math.isnan(key)


# ─── Node Representation ───────────────────────────────────────────────────

class Entry:
    """A stored key/value pair."""
    __slots__ = ('key', 'value')

    def __init__(self, key: Any, value: Any):
        self.key = key
        self.value = value

    def __repr__(self) -> str:
        return f"Entry({self.key!r}, {self.value!r})"


class BTreeNode:
    """
    A B-Tree node (leaf or internal).
    The leaf/internal kind is fixed when the node is created.
    """
    __slots__ = ('entries', 'children', 'is_leaf')

    def __init__(self, is_leaf: bool):
        self.is_leaf = is_leaf
        self.entries: List[Entry] = []
        self.children: List['BTreeNode'] = []   # internal only

    @property
    def key_count(self) -> int:
        return len(self.entries)

    def keys(self) -> List[Any]:
        return [e.key for e in self.entries]

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf else "internal"
        return f"BTreeNode({kind}, keys={self.keys()!r})"


# ─── B-Tree ────────────────────────────────────────────────────────────────

class BTreeIndex:
    """
    In-memory ordered B-Tree index.

    Usage:
        index = BTreeIndex(order=3)
        index.put(10, "ten")
        index.get(10)              # "ten"
        index.range_query(5, 20)   # values with keys in [5, 20], ascending
        index.clear()
    """

    def __init__(self, order: int = DEFAULT_ORDER):
        if isinstance(order, bool) or not isinstance(order, int):
            raise ValueError(f"B-Tree order must be an integer, got {order!r}")
        if order < MIN_ORDER:
            raise ValueError(f"B-Tree order must be >= {MIN_ORDER}, got {order}")
        self._order = order
        self._root = BTreeNode(is_leaf=True)
        self._size = 0
        logger.debug("Created B-Tree index with order %d", order)

    @property
    def order(self) -> int:
        return self._order

    @property
    def max_entries(self) -> int:
        return self._order - 1

    @property
    def height(self) -> int:
        """Number of levels from the root down to the leaves."""
        levels = 1
        node = self._root
        while not node.is_leaf:
            node = node.children[0]
            levels += 1
        return levels

    @property
    def root(self) -> BTreeNode:
        return self._root

    def size(self) -> int:
        """Number of successful put() calls since creation or the last clear()."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: Any) -> bool:
        return self.contains_key(key)

    def __repr__(self) -> str:
        return f"BTreeIndex(order={self._order}, size={self._size}, height={self.height})"

    # ─── Insert ─────────────────────────────────────────────────────

    def put(self, key: Any, value: Any) -> None:
        """
        Insert a (key, value) entry.
        An existing equal key is never replaced: the new entry is added beside it.
        """
        if _is_null_key(key):
            raise InvalidKeyError(key)

        if self._is_full(self._root):
            # Root is full: grow the tree by one level before descending
            new_root = BTreeNode(is_leaf=False)
            new_root.children.append(self._root)
            self._split_child(new_root, 0)
            self._root = new_root
            logger.debug("Root split, tree height now %d", self.height)

        self._insert_non_full(self._root, key, value)
        self._size += 1

    def _insert_non_full(self, node: BTreeNode, key: Any, value: Any) -> None:
        """Insert into the subtree rooted at a node that is known not to be full."""
        while True:
            # Rightmost entry whose key is <= key
            i = len(node.entries) - 1
            while i >= 0 and key < node.entries[i].key:
                i -= 1

            if node.is_leaf:
                node.entries.insert(i + 1, Entry(key, value))
                return

            i += 1
            if self._is_full(node.children[i]):
                self._split_child(node, i)
                # The promoted entry now sits at i; go right if it is smaller
                if node.entries[i].key < key:
                    i += 1
            node = node.children[i]

    # ─── Split ──────────────────────────────────────────────────────

    def _split_child(self, parent: BTreeNode, index: int) -> None:
        """
        Split the full child parent.children[index].
        The median entry is PUSHED UP into the parent.

        Before split (order=5): child.entries=[e0,e1,e2,e3], children=[c0..c4]
        mid=2: promoted=e2
        Left:  entries=[e0,e1], children=[c0,c1,c2]
        Right: entries=[e3],    children=[c3,c4]
        """
        child = parent.children[index]
        sibling = BTreeNode(is_leaf=child.is_leaf)
        mid = (self._order - 1) // 2

        sibling.entries = child.entries[mid + 1:]
        del child.entries[mid + 1:]
        if not child.is_leaf:
            sibling.children = child.children[mid + 1:]
            del child.children[mid + 1:]

        promoted = child.entries.pop(mid)
        parent.entries.insert(index, promoted)
        parent.children.insert(index + 1, sibling)

    def _is_full(self, node: BTreeNode) -> bool:
        return len(node.entries) >= self._order - 1

    # ─── Search ─────────────────────────────────────────────────────

    def get(self, key: Any) -> Optional[Any]:
        """
        Exact-match lookup. Returns the value of the first matching entry met
        top-down, or None if the key is absent (or None itself).
        """
        if _is_null_key(key):
            return None
        entry = self._search(self._root, key)
        return entry.value if entry is not None else None

    def contains_key(self, key: Any) -> bool:
        return self.get(key) is not None

    def _search(self, node: BTreeNode, key: Any) -> Optional[Entry]:
        while True:
            i = 0
            while i < len(node.entries) and key > node.entries[i].key:
                i += 1
            if i < len(node.entries) and node.entries[i].key == key:
                return node.entries[i]
            if node.is_leaf:
                return None
            node = node.children[i]

    # ─── Range Query ────────────────────────────────────────────────

    def range_query(self, min_key: Any, max_key: Any) -> List[Any]:
        """
        Values of all entries with min_key <= key <= max_key, ascending by key.
        The result is a new list; later mutations of the index do not affect it.
        Returns [] if a bound is None or min_key > max_key.
        """
        results: List[Any] = []
        if _is_null_key(min_key) or _is_null_key(max_key) or min_key > max_key:
            return results
        self._range_collect(self._root, min_key, max_key, results)
        return results

    def _range_collect(self, node: BTreeNode, min_key: Any, max_key: Any,
                       results: List[Any]) -> None:
        """
        Pruned in-order walk: only subtrees that can intersect the bounds.
        Explicit stack of pending nodes and entries, no recursion.
        """
        stack: List[Any] = [node]
        while stack:
            item = stack.pop()
            if isinstance(item, Entry):
                if min_key <= item.key:
                    results.append(item.value)
                continue

            entries = item.entries
            i = 0
            while i < len(entries) and min_key > entries[i].key:
                i += 1

            pending: List[Any] = []
            if not item.is_leaf:
                pending.append(item.children[i])
            while i < len(entries) and entries[i].key <= max_key:
                pending.append(entries[i])
                if not item.is_leaf:
                    pending.append(item.children[i + 1])
                i += 1
            stack.extend(reversed(pending))

    # ─── Traversal ──────────────────────────────────────────────────

    def items(self) -> List[Tuple[Any, Any]]:
        """Full in-order dump of (key, value) pairs."""
        out: List[Tuple[Any, Any]] = []
        stack: List[Any] = [self._root]
        while stack:
            item = stack.pop()
            if isinstance(item, Entry):
                out.append((item.key, item.value))
            elif item.is_leaf:
                out.extend((e.key, e.value) for e in item.entries)
            else:
                pending: List[Any] = []
                for i, entry in enumerate(item.entries):
                    pending.append(item.children[i])
                    pending.append(entry)
                pending.append(item.children[-1])
                stack.extend(reversed(pending))
        return out

    def keys(self) -> List[Any]:
        return [k for k, _ in self.items()]

    # ─── Reset ──────────────────────────────────────────────────────

    def clear(self) -> None:
        """Drop every entry. The order is kept."""
        self._root = BTreeNode(is_leaf=True)
        self._size = 0
        logger.debug("B-Tree index cleared")

    # ─── Debug / Verification ───────────────────────────────────────

    def verify_structure(self) -> List[str]:
        """
        Verify index structural integrity.
        Returns list of issues found (empty = healthy).

        Checked per node: capacity, key ordering, separator bounds
        inherited from the parent (inclusive), and children count.
        Checked globally: uniform leaf depth and the size counter.
        """
        issues: List[str] = []
        leaf_depths = set()
        stored = 0

        # (node, low, high, depth, label)
        stack = [(self._root, None, None, 0, "root")]
        while stack:
            node, low, high, depth, label = stack.pop()
            keys = node.keys()
            stored += len(keys)

            if len(keys) > self._order - 1:
                issues.append(f"{label}: {len(keys)} entries exceeds capacity {self._order - 1}")

            for i in range(1, len(keys)):
                if keys[i] < keys[i - 1]:
                    issues.append(f"{label}: keys not sorted at position {i}")

            for k in keys:
                if low is not None and k < low:
                    issues.append(f"{label}: key {k!r} below parent separator {low!r}")
                if high is not None and k > high:
                    issues.append(f"{label}: key {k!r} above parent separator {high!r}")

            if node.is_leaf:
                if node.children:
                    issues.append(f"{label}: leaf has children")
                leaf_depths.add(depth)
                continue

            if len(node.children) != len(keys) + 1:
                issues.append(f"{label}: children count mismatch "
                              f"({len(node.children)} children, {len(keys)} keys)")
                continue

            for i, child in enumerate(node.children):
                lo = keys[i - 1] if i > 0 else low
                hi = keys[i] if i < len(keys) else high
                stack.append((child, lo, hi, depth + 1, f"level {depth + 1} child {i}"))

        if len(leaf_depths) > 1:
            issues.append(f"Leaves at different depths: {sorted(leaf_depths)}")
        if stored != self._size:
            issues.append(f"Size counter {self._size} != stored entries {stored}")
        return issues
